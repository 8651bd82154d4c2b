"""Application entry point."""
import os
import click
from flask.cli import with_appcontext
from dotenv import load_dotenv
from classlog import create_app, db

# Load environment variables
load_dotenv()

# Create Flask app
app = create_app(os.getenv('FLASK_ENV', 'development'))

@app.cli.command('reset-db')
@with_appcontext
def reset_db():
    """Reset database completely."""
    if click.confirm('This will delete all data and recreate tables. Continue?'):
        app.extensions['session_liveness'].stop_all()
        db.drop_all()
        db.create_all()
        click.echo('Database reset complete!')

if __name__ == '__main__':
    # Development server
    port = int(os.environ.get('PORT', 5000))
    host = os.environ.get('HOST', '127.0.0.1')
    debug = os.environ.get('FLASK_ENV') == 'development'

    # rotation timers live in this process only
    app.run(host=host, port=port, debug=debug, use_reloader=False)
