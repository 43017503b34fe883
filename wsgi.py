# ==============================================================================
# WSGI - Panel de catálogo en producción
# ==============================================================================
#   gunicorn wsgi:app --bind 0.0.0.0:$PORT
#
#   repo_root/
#   ├── wsgi.py
#   ├── pyproject.toml
#   └── catalog_admin/
#       ├── main.py         <- create_app()
#       ├── services/
#       └── repositories/
#
# Variables: CATALOG_DATA_DIR, CATALOG_SECRET_KEY, ADMIN_EMAIL_DOMAIN
# ==============================================================================

import os

from catalog_admin.main import create_app

app = create_app()

if __name__ == '__main__':
    app.run(host='127.0.0.1', port=int(os.environ.get('PORT', 5000)))
