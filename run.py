"""
Entry point: python run.py (sviluppo) oppure gunicorn "run:app"
"""

import logging

from config import Config
from fittrack import create_app

logging.basicConfig(
    level=getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s %(levelname)s %(name)s: %(message)s'
)

app = create_app()

if __name__ == '__main__':
    app.run(host='0.0.0.0', port=Config.PORT)
