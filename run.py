import os

from waitress import serve
from asset_admin.app import create_app

# create_app() creates the tables and seeds roles (and the first admin when
# ADMIN_PASSWORD is set)
app = create_app()

serve(app, host=os.environ.get('HOST', '0.0.0.0'), port=int(os.environ.get('PORT', 5000)))
