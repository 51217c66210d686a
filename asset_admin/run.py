import sys
from asset_admin.app import create_app
from asset_admin.app.logger import get_logger

app = create_app()
get_logger("asset_admin.run").info("Python version: %s", sys.version.split()[0])


if __name__ == '__main__':
    app.run(debug=True)
