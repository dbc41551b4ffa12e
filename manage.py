from flask.cli import FlaskGroup

from ecocred.factory import create_app

# `python manage.py db upgrade`, `python manage.py ledger bootstrap`, ...
cli = FlaskGroup(create_app=create_app)

if __name__ == '__main__':
    cli()
