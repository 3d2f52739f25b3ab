#!/usr/bin/env python3
"""
Stock Forecast - Development Server Launcher

Prepares a local SQLite database, optionally fills it with a reproducible
demo store, checks that the demand forecast answers for a stocked item,
and starts the Flask development server.

Install the project first (pip install -e .), then:

    python start_dev.py                       # Start with an empty database
    python start_dev.py --demo                # Load the demo store first
    python start_dev.py --demo --seed 7       # A different, still reproducible store
    python start_dev.py --demo --check        # Verify the forecast route, then serve
    python start_dev.py --check --no-serve    # Verify only
"""

import os
import sys
import argparse
from pathlib import Path

ROOT = Path(__file__).parent


def setup_environment(db_path=None):
    """Default to development settings and a database under instance/"""
    os.environ.setdefault('FLASK_APP', 'web.app:app')
    os.environ.setdefault('FLASK_ENV', 'development')

    db_path = Path(db_path) if db_path else ROOT / 'instance' / 'stock_forecast.db'
    db_path.parent.mkdir(exist_ok=True)
    os.environ.setdefault('DATABASE_URL', f'sqlite:///{db_path}')

    sys.path.insert(0, str(ROOT))


def load_demo_data(app, count=None, days=90, seed=42):
    """
    Load the demo store unless the database already has items.

    Returns:
        (number of items, whether demo data was loaded)
    """
    from src.database.models import db, Item
    from src.demo_data import load_demo_data_to_db

    with app.app_context():
        existing = Item.query.count()
        if existing > 0:
            return existing, False

        item_ids = load_demo_data_to_db(db.session, count=count, days=days, seed=seed)
        return len(item_ids), True


def check_forecast(app, periods=7):
    """
    Request a forecast for the first active item through the API.

    Returns:
        Dict with the item code, trend, accuracy and recommended action

    Raises:
        RuntimeError: when there is no item or a route does not answer 200
    """
    client = app.test_client()

    response = client.get('/api/items?limit=1')
    if response.status_code != 200:
        raise RuntimeError(f"/api/items returned {response.status_code}")
    items = response.get_json()['items']
    if not items:
        raise RuntimeError("No items to forecast; load demo data with --demo")

    item = items[0]
    response = client.get(f"/api/dashboard/prediction/{item['id']}?periods={periods}")
    if response.status_code != 200:
        raise RuntimeError(f"Forecast for {item['code']} returned {response.status_code}")

    body = response.get_json()
    return {
        'item': item['code'],
        'history_days': len(body['historical_data']),
        'trend': body['prediction']['trend'],
        'accuracy': body['prediction']['accuracy'],
        'action': body['recommendation']['action'],
    }


def main(argv=None):
    """Main entry point"""
    parser = argparse.ArgumentParser(description='Stock Forecast Development Server')
    parser.add_argument('--demo', action='store_true', help='Load the demo store on startup')
    parser.add_argument('--demo-count', type=int, default=None,
                        help='Number of catalog items to load (default: whole catalog)')
    parser.add_argument('--days', type=int, default=90,
                        help='Days of demo movement history (default: 90)')
    parser.add_argument('--seed', type=int, default=42,
                        help='Random seed for the demo store (default: 42)')
    parser.add_argument('--check', action='store_true',
                        help='Forecast the first item through the API before serving')
    parser.add_argument('--no-serve', action='store_true', help='Exit after setup and checks')
    parser.add_argument('--db', default=None, help='SQLite file (default: instance/stock_forecast.db)')
    parser.add_argument('--port', type=int, default=5101, help='Port to run server on (default: 5101)')
    parser.add_argument('--host', default='127.0.0.1', help='Host to bind to (default: 127.0.0.1)')
    args = parser.parse_args(argv)

    setup_environment(args.db)

    from web.app import create_app
    app = create_app()

    if args.demo:
        count, loaded = load_demo_data(app, count=args.demo_count, days=args.days, seed=args.seed)
        if loaded:
            print(f"Loaded {count} demo items with {args.days} days of movements (seed {args.seed})")
        else:
            print(f"Database has {count} items. Skipping demo data.")

    if args.check:
        try:
            summary = check_forecast(app)
        except RuntimeError as e:
            print(f"Forecast check failed: {e}")
            return 1
        print(
            f"Forecast OK for {summary['item']}: {summary['history_days']} days of history, "
            f"trend {summary['trend']}, accuracy {summary['accuracy']}, action {summary['action']}"
        )

    if args.no_serve:
        return 0

    print(f"Server running at http://{args.host}:{args.port}/api/dashboard/stats")
    app.run(debug=True, port=args.port, host=args.host, use_reloader=False)
    return 0


if __name__ == '__main__':
    sys.exit(main())
