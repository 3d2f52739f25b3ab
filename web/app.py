"""
Stock Forecast - Flask Web Application

Inventory management JSON API with least squares demand forecasting
and procurement recommendations.
"""

import os
import sys
import logging
from datetime import date
from flask import Flask, request, jsonify
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config.settings import get_config
from src.database.models import db
from src.database.repository import ConflictError, InventoryRepository, NotFoundError, parse_date
from src.forecasting import ForecastEngine

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

REPORT_TYPES = ('stock', 'movement', 'orders')

# =============================================================================
# App Factory
# =============================================================================

def create_app(config_class=None):
    """Create Flask application"""
    app = Flask(__name__)

    # Load configuration
    if config_class is None:
        config_class = get_config()
    app.config.from_object(config_class)

    # Initialize extensions
    db.init_app(app)

    # Rate limiting
    limiter = Limiter(
        key_func=get_remote_address,
        app=app,
        default_limits=[app.config['RATELIMIT_DEFAULT']]
    )

    # Create tables
    with app.app_context():
        db.create_all()
        logger.info("Database tables created")

    def repository():
        return InventoryRepository(
            db.session,
            page_size=app.config['DEFAULT_PAGE_SIZE'],
            auto_reject_days=app.config['ORDER_AUTO_REJECT_DAYS']
        )

    def payload():
        return request.get_json(silent=True) or {}

    def listing(key, rows, pagination, **extra):
        body = {key: [row.to_dict() for row in rows], 'pagination': pagination}
        body.update(extra)
        return jsonify(body)

    def page_args():
        return (
            request.args.get('page', 1, type=int),
            request.args.get('limit', app.config['DEFAULT_PAGE_SIZE'], type=int),
            request.args.get('search', '')
        )

    # =============================================================================
    # API Routes - Health & Dashboard
    # =============================================================================

    @app.route('/api/health')
    @limiter.exempt
    def api_health():
        return jsonify({'status': 'ok', 'app_name': app.config['APP_NAME']})

    @app.route('/api/dashboard/stats', methods=['GET'])
    def api_dashboard_stats():
        """Dashboard summary with a forecast of monthly stock received"""
        repo = repository()

        monthly = repo.monthly_stock_in(months=app.config['DASHBOARD_TREND_MONTHS'])
        trends = [
            {'period': row['month'], 'value': row['total_in'], 'outgoing': row['total_out']}
            for row in monthly
        ]

        engine = ForecastEngine.from_values([row['value'] for row in trends])
        prediction = engine.predict(app.config['DASHBOARD_FORECAST_PERIODS'])

        return jsonify({
            'stats': repo.dashboard_stats(),
            'recent_movements': repo.recent_movements(),
            'low_stock_items': [item.to_dict() for item in repo.low_stock_items()],
            'trends': trends,
            'prediction': prediction.to_dict()
        })

    @app.route('/api/dashboard/prediction/<item_id>', methods=['GET'])
    def api_item_prediction(item_id):
        """Demand forecast and reorder recommendation for one item"""
        periods = request.args.get('periods', app.config['FORECAST_DEFAULT_PERIODS'], type=int)

        repo = repository()
        item = repo.get_item(item_id)
        history = repo.daily_movements(item.id, days=app.config['FORECAST_HISTORY_DAYS'])

        # Outgoing quantities are the demand signal
        engine = ForecastEngine.from_records(history, value_key='stock_out')
        prediction = engine.predict(periods)
        recommendation = engine.get_recommendation(item.stock_qty, item.min_stock, item.max_stock)

        return jsonify({
            'item': item.to_dict(),
            'historical_data': history,
            'prediction': prediction.to_dict(),
            'recommendation': recommendation.to_dict()
        })

    # =============================================================================
    # API Routes - Items
    # =============================================================================

    @app.route('/api/items', methods=['GET'])
    def api_list_items():
        page, limit, search = page_args()
        rows, pagination = repository().list_items(
            page=page, limit=limit, search=search,
            category_id=request.args.get('category_id')
        )
        return listing('items', rows, pagination)

    @app.route('/api/items/<item_id>', methods=['GET'])
    def api_get_item(item_id):
        return jsonify({'item': repository().get_item(item_id).to_dict()})

    @app.route('/api/items', methods=['POST'])
    def api_create_item():
        item = repository().create_item(payload())
        return jsonify({'message': 'Item created successfully', 'item': item.to_dict()}), 201

    @app.route('/api/items/<item_id>', methods=['PUT'])
    def api_update_item(item_id):
        item = repository().update_item(item_id, payload())
        return jsonify({'message': 'Item updated successfully', 'item': item.to_dict()})

    @app.route('/api/items/<item_id>', methods=['DELETE'])
    def api_delete_item(item_id):
        repository().deactivate_item(item_id)
        return jsonify({'message': 'Item deleted successfully'})

    # =============================================================================
    # API Routes - Categories
    # =============================================================================

    @app.route('/api/categories', methods=['GET'])
    def api_list_categories():
        categories = repository().list_categories()
        return jsonify({'categories': [c.to_dict() for c in categories]})

    @app.route('/api/categories/<category_id>', methods=['GET'])
    def api_get_category(category_id):
        return jsonify({'category': repository().get_category(category_id).to_dict()})

    @app.route('/api/categories', methods=['POST'])
    def api_create_category():
        category = repository().create_category(payload())
        return jsonify({'message': 'Category created successfully', 'category': category.to_dict()}), 201

    @app.route('/api/categories/<category_id>', methods=['PUT'])
    def api_update_category(category_id):
        category = repository().update_category(category_id, payload())
        return jsonify({'message': 'Category updated successfully', 'category': category.to_dict()})

    @app.route('/api/categories/<category_id>', methods=['DELETE'])
    def api_delete_category(category_id):
        repository().delete_category(category_id)
        return jsonify({'message': 'Category deleted successfully'})

    # =============================================================================
    # API Routes - Stock In
    # =============================================================================

    @app.route('/api/stock-in', methods=['GET'])
    def api_list_stock_in():
        page, limit, search = page_args()
        rows, pagination = repository().list_stock_in(page=page, limit=limit, search=search)
        return listing('stock_in', rows, pagination)

    @app.route('/api/stock-in/<record_id>', methods=['GET'])
    def api_get_stock_in(record_id):
        return jsonify({'stock_in': repository().get_stock_in(record_id).to_dict()})

    @app.route('/api/stock-in', methods=['POST'])
    def api_create_stock_in():
        data = payload()
        record = repository().record_stock_in(data, created_by=data.get('created_by'))
        return jsonify({'message': 'Stock in record created successfully', 'stock_in': record.to_dict()}), 201

    @app.route('/api/stock-in/<record_id>', methods=['PUT'])
    def api_update_stock_in(record_id):
        record = repository().update_stock_in(record_id, payload())
        return jsonify({'message': 'Stock in record updated successfully', 'stock_in': record.to_dict()})

    @app.route('/api/stock-in/<record_id>', methods=['DELETE'])
    def api_delete_stock_in(record_id):
        repository().delete_stock_in(record_id)
        return jsonify({'message': 'Stock in record deleted successfully'})

    # =============================================================================
    # API Routes - Stock Out
    # =============================================================================

    @app.route('/api/stock-out', methods=['GET'])
    def api_list_stock_out():
        page, limit, search = page_args()
        rows, pagination = repository().list_stock_out(page=page, limit=limit, search=search)
        return listing('stock_out', rows, pagination)

    @app.route('/api/stock-out/<record_id>', methods=['GET'])
    def api_get_stock_out(record_id):
        return jsonify({'stock_out': repository().get_stock_out(record_id).to_dict()})

    @app.route('/api/stock-out', methods=['POST'])
    def api_create_stock_out():
        data = payload()
        record = repository().record_stock_out(data, created_by=data.get('created_by'))
        return jsonify({'message': 'Stock out record created successfully', 'stock_out': record.to_dict()}), 201

    @app.route('/api/stock-out/<record_id>', methods=['PUT'])
    def api_update_stock_out(record_id):
        record = repository().update_stock_out(record_id, payload())
        return jsonify({'message': 'Stock out record updated successfully', 'stock_out': record.to_dict()})

    @app.route('/api/stock-out/<record_id>', methods=['DELETE'])
    def api_delete_stock_out(record_id):
        repository().delete_stock_out(record_id)
        return jsonify({'message': 'Stock out record deleted successfully'})

    # =============================================================================
    # API Routes - Orders
    # =============================================================================

    @app.route('/api/orders', methods=['GET'])
    def api_list_orders():
        page, limit, search = page_args()
        rows, pagination = repository().list_orders(
            page=page, limit=limit, search=search,
            status=request.args.get('status'),
            supplier_id=request.args.get('supplier_id')
        )
        return listing('orders', rows, pagination)

    @app.route('/api/orders/<order_id>', methods=['GET'])
    def api_get_order(order_id):
        order = repository().get_order(order_id)
        return jsonify({
            'order': order.to_dict(),
            'items': [line.to_dict() for line in order.lines]
        })

    @app.route('/api/orders', methods=['POST'])
    def api_create_order():
        order = repository().create_order(payload())
        return jsonify({
            'message': 'Order created successfully',
            'order': order.to_dict(include_lines=True)
        }), 201

    @app.route('/api/orders/<order_id>/status', methods=['PUT'])
    def api_update_order_status(order_id):
        data = payload()
        order = repository().update_order_status(order_id, data.get('status'), user_id=data.get('user_id'))
        return jsonify({'message': 'Order status updated successfully', 'order': order.to_dict()})

    @app.route('/api/orders/<order_id>', methods=['DELETE'])
    def api_delete_order(order_id):
        repository().delete_order(order_id)
        return jsonify({'message': 'Order deleted successfully'})

    # =============================================================================
    # API Routes - Users
    # =============================================================================

    @app.route('/api/users', methods=['GET'])
    def api_list_users():
        page, limit, search = page_args()
        rows, pagination = repository().list_users(
            page=page, limit=limit, search=search,
            role=request.args.get('role')
        )
        return listing('users', rows, pagination)

    @app.route('/api/users/<user_id>', methods=['GET'])
    def api_get_user(user_id):
        return jsonify({'user': repository().get_user(user_id).to_dict()})

    @app.route('/api/users', methods=['POST'])
    def api_create_user():
        user = repository().create_user(payload())
        return jsonify({'message': 'User created successfully', 'user': user.to_dict()}), 201

    @app.route('/api/users/<user_id>', methods=['PUT'])
    def api_update_user(user_id):
        user = repository().update_user(user_id, payload())
        return jsonify({'message': 'User updated successfully', 'user': user.to_dict()})

    @app.route('/api/users/<user_id>', methods=['DELETE'])
    def api_delete_user(user_id):
        repository().delete_user(user_id)
        return jsonify({'message': 'User deleted successfully'})

    # =============================================================================
    # API Routes - Reports
    # =============================================================================

    @app.route('/api/reports', methods=['GET'])
    def api_reports():
        """Stock, movement and order reports; all three when no type is given"""
        report_type = request.args.get('type')
        if report_type and report_type not in REPORT_TYPES:
            raise ValueError(f"Invalid report type: {report_type}")

        today = date.today()
        start = request.args.get('start_date')
        end = request.args.get('end_date')
        start = parse_date(start, 'start_date') if start else date(today.year, 1, 1)
        end = parse_date(end, 'end_date') if end else date(today.year, 12, 31)

        repo = repository()
        reports = {}
        if report_type in (None, 'stock'):
            reports['stock'] = repo.stock_report()
        if report_type in (None, 'movement'):
            reports['movement'] = repo.movement_report(start, end)
        if report_type in (None, 'orders'):
            reports['orders'] = repo.orders_report(start, end)

        return jsonify({'reports': reports})

    # =============================================================================
    # Error Handlers
    # =============================================================================

    @app.errorhandler(ConflictError)
    def conflict(e):
        db.session.rollback()
        return jsonify({'error': str(e)}), 409

    @app.errorhandler(ValueError)
    def bad_request(e):
        db.session.rollback()
        return jsonify({'error': str(e)}), 400

    @app.errorhandler(NotFoundError)
    def missing(e):
        db.session.rollback()
        return jsonify({'error': str(e)}), 404

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({'error': 'Not found'}), 404

    @app.errorhandler(500)
    def server_error(e):
        logger.error(f"Server error: {e}")
        return jsonify({'error': 'Internal server error'}), 500

    return app


# =============================================================================
# Main
# =============================================================================

app = create_app()

if __name__ == '__main__':
    port = int(os.environ.get('PORT', 5000))
    debug = os.environ.get('FLASK_DEBUG', 'True').lower() == 'true'
    app.run(debug=debug, port=port, host='0.0.0.0')
