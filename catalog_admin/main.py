# ==============================================================================
# PANEL DE ADMINISTRACIÓN DEL CATÁLOGO - Superficie HTTP (Flask)
# ==============================================================================
# API JSON delgada sobre los servicios. Las rutas NO contienen lógica de
# negocio: leen la petición, llaman a un servicio y traducen el resultado.
#
# IDENTIDAD:
# El proveedor de identidad externo deja el principal en la sesión
# (session['principal'] = {"email", "role"}). El rol administrador se
# recalcula en cada petición; nunca se guarda.
#
# ERRORES → CÓDIGOS HTTP:
#   NotFoundError             → 404
#   ReferentialConflictError  → 409 (con indicación de archivar)
#   ValidationError           → 400
#   UploadError               → 502
#   TransientStoreError       → 503
#   sin sesión                → 401
#   sin permiso de admin      → 403
# ==============================================================================

import os
from datetime import date
from functools import wraps
from typing import Optional

from flask import Blueprint, Flask, Response, request, send_from_directory, session

from catalog_admin.app_container import AppContainer, get_container
from catalog_admin.errors import (
    NotFoundError,
    ReferentialConflictError,
    TransientStoreError,
    UploadError,
    ValidationError,
)
from catalog_admin.models import Principal
from catalog_admin.performance_logger import init_profiling
from catalog_admin.services.access_service import to_principal
from catalog_admin.services.catalog_query_service import STATUS_FILTER_ALL, export_filename


# ═══════════════════════════════════════════════════════════════════════════════
# CONFIGURACIÓN
# ═══════════════════════════════════════════════════════════════════════════════
# SECRET_KEY: En producción DEBE definirse via variable de entorno
# Comando: export CATALOG_SECRET_KEY="tu_clave_secreta_muy_larga_y_aleatoria"
_DEFAULT_SECRET = "catalog_admin_dev_secret_key_change_in_production"

MAX_UPLOAD_SIZE = 5 * 1024 * 1024  # 5 MB


class SessionIdentityProvider:
    """Lee el principal que el proveedor de identidad dejó en la sesión."""

    def get_current_principal(self) -> Optional[Principal]:
        return to_principal(session.get('principal'))


api = Blueprint('api', __name__)


def _container() -> AppContainer:
    return get_container()


def _current_user() -> Optional[str]:
    principal = _container().access_service.current_principal()
    return principal.email if principal else None


def _payload() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


# ═══════════════════════════════════════════════════════════════════════════════
# DECORADORES DE ACCESO
# ═══════════════════════════════════════════════════════════════════════════════

def login_required(f):
    @wraps(f)
    def wrapper(*args, **kwargs):
        if _container().access_service.current_principal() is None:
            return {"success": False, "error": "Debes iniciar sesión."}, 401
        return f(*args, **kwargs)
    return wrapper


def admin_required(f):
    @wraps(f)
    def wrapper(*args, **kwargs):
        access = _container().access_service
        if access.current_principal() is None:
            return {"success": False, "error": "Debes iniciar sesión."}, 401
        if not access.current_is_admin():
            return {"success": False, "error": "Permiso denegado."}, 403
        return f(*args, **kwargs)
    return wrapper


# ═══════════════════════════════════════════════════════════════════════════════
# SESIÓN Y PANEL
# ═══════════════════════════════════════════════════════════════════════════════

@api.route("/api/me", methods=["GET"])
def api_me():
    """Principal actual y su capacidad de administrador."""
    access = _container().access_service
    principal = access.current_principal()
    return {
        "success": True,
        "authenticated": principal is not None,
        "email": principal.email if principal else None,
        "is_admin": access.is_admin(principal),
    }


@api.route("/api/dashboard", methods=["GET"])
@admin_required
def api_dashboard():
    container = _container()
    return {
        "success": True,
        "stats": container.stock_status_service.get_dashboard_stats(),
        "orders_by_status": container.order_service.orders_by_status(),
        "active_banner": _banner_or_none(container.banner_service.get_active_banner()),
    }


def _banner_or_none(banner):
    return banner.to_dict() if banner else None


# ═══════════════════════════════════════════════════════════════════════════════
# PRODUCTOS
# ═══════════════════════════════════════════════════════════════════════════════

@api.route("/api/products", methods=["GET"])
@admin_required
def api_list_products():
    """Vista filtrada del catálogo, cada producto con su stock_status."""
    container = _container()
    products = container.catalog_query_service.search(
        request.args.get("q", ""),
        request.args.get("status", STATUS_FILTER_ALL)
    )
    return {
        "success": True,
        "products": container.stock_status_service.annotate(products),
    }


@api.route("/api/products/export", methods=["GET"])
@admin_required
def api_export_products():
    """CSV de la vista filtrada (mismos parámetros que el listado)."""
    csv_text = _container().catalog_query_service.export(
        request.args.get("q", ""),
        request.args.get("status", STATUS_FILTER_ALL)
    )
    filename = export_filename(date.today())
    return Response(
        csv_text,
        mimetype="text/csv",
        headers={"Content-Disposition": f"attachment;filename={filename}"}
    )


@api.route("/api/products", methods=["POST"])
@admin_required
def api_create_product():
    product = _container().product_service.create_product(_payload(), _current_user())
    return {"success": True, "product": _annotated(product)}, 201


@api.route("/api/products/<product_id>", methods=["GET"])
@admin_required
def api_get_product(product_id):
    product = _container().product_service.get_product(product_id)
    return {"success": True, "product": _annotated(product)}


@api.route("/api/products/<product_id>", methods=["PATCH"])
@admin_required
def api_update_product(product_id):
    product = _container().product_service.update_product(product_id, _payload(), _current_user())
    return {"success": True, "product": _annotated(product)}


@api.route("/api/products/<product_id>/archive", methods=["POST"])
@admin_required
def api_archive_product(product_id):
    product = _container().product_service.archive_product(product_id, _current_user())
    return {"success": True, "product": _annotated(product)}


@api.route("/api/products/<product_id>", methods=["DELETE"])
@admin_required
def api_delete_product(product_id):
    removed = _container().product_service.delete_product(product_id, _current_user())
    return {"success": True, "message": f"Producto '{removed.name}' eliminado"}


def _annotated(product):
    return _container().stock_status_service.annotate([product])[0]


@api.route("/api/uploads", methods=["POST"])
@admin_required
def api_upload_image():
    """Sube una imagen (multipart, campo "file") y devuelve su URL pública."""
    file = request.files.get("file")
    if file is None or not file.filename:
        raise ValidationError("file", "es requerido")
    url = _container().image_uploader.upload(file.read(), file.filename)
    return {"success": True, "url": url}, 201


# ═══════════════════════════════════════════════════════════════════════════════
# PEDIDOS Y CLIENTES
# ═══════════════════════════════════════════════════════════════════════════════

@api.route("/api/orders", methods=["GET"])
@admin_required
def api_list_orders():
    orders = _container().order_service.list_orders(request.args.get("q", ""))
    return {"success": True, "orders": [o.to_dict() for o in orders]}


@api.route("/api/orders", methods=["POST"])
@login_required
def api_create_order():
    """Alta de pedido desde la tienda: el comprador es el principal actual."""
    data = _payload()
    order = _container().order_service.create_order(
        user_id=_current_user(),
        items=data.get("items") or [],
        shipping_address=data.get("shipping_address", ""),
        payment_method=data.get("payment_method", ""),
        total_amount=data.get("total_amount"),
        receipt_url=data.get("receipt_url")
    )
    return {"success": True, "order": order.to_dict()}, 201


@api.route("/api/orders/<order_id>", methods=["GET"])
@admin_required
def api_get_order(order_id):
    return {"success": True, "order": _container().order_service.get_order_detail(order_id)}


@api.route("/api/orders/<order_id>/status", methods=["POST"])
@admin_required
def api_change_order_status(order_id):
    order = _container().order_service.change_status(
        order_id,
        _payload().get("status"),
        _current_user()
    )
    return {"success": True, "order": order.to_dict()}


@api.route("/api/orders/<order_id>", methods=["DELETE"])
@admin_required
def api_delete_order(order_id):
    _container().order_service.delete_order(order_id, _current_user())
    return {"success": True, "message": f"Pedido {order_id} eliminado"}


@api.route("/api/customers", methods=["GET"])
@admin_required
def api_customers():
    return {"success": True, "customers": _container().order_service.summarize_customers()}


# ═══════════════════════════════════════════════════════════════════════════════
# BANNERS
# ═══════════════════════════════════════════════════════════════════════════════

@api.route("/api/banners", methods=["GET"])
@admin_required
def api_list_banners():
    banners = _container().banner_service.list_banners()
    return {"success": True, "banners": [b.to_dict() for b in banners]}


@api.route("/api/banners", methods=["POST"])
@admin_required
def api_create_banner():
    banner = _container().banner_service.create_banner(_payload(), _current_user())
    return {"success": True, "banner": banner.to_dict()}, 201


@api.route("/api/banners/<banner_id>", methods=["PATCH"])
@admin_required
def api_update_banner(banner_id):
    banner = _container().banner_service.update_banner(banner_id, _payload(), _current_user())
    return {"success": True, "banner": banner.to_dict()}


@api.route("/api/banners/<banner_id>/activate", methods=["POST"])
@admin_required
def api_activate_banner(banner_id):
    banner = _container().banner_service.activate(banner_id, _current_user())
    return {"success": True, "banner": banner.to_dict()}


@api.route("/api/banners/<banner_id>/deactivate", methods=["POST"])
@admin_required
def api_deactivate_banner(banner_id):
    banner = _container().banner_service.deactivate(banner_id, _current_user())
    return {"success": True, "banner": banner.to_dict()}


@api.route("/api/banners/<banner_id>", methods=["DELETE"])
@admin_required
def api_delete_banner(banner_id):
    _container().banner_service.delete_banner(banner_id, _current_user())
    return {"success": True, "message": f"Banner {banner_id} eliminado"}


# ═══════════════════════════════════════════════════════════════════════════════
# CONFIGURACIÓN Y AUDITORÍA
# ═══════════════════════════════════════════════════════════════════════════════

@api.route("/api/settings", methods=["GET"])
@admin_required
def api_get_settings():
    return {"success": True, "settings": _container().settings_service.current.to_dict()}


@api.route("/api/settings", methods=["POST"])
@admin_required
def api_update_settings():
    """
    Cambia la configuración. {"toggle_theme": true} alterna el tema;
    todo se valida antes de guardar y se escribe en una sola operación.
    """
    data = _payload()
    current = _container().settings_service.update(
        data,
        _current_user(),
        toggle_theme=bool(data.get("toggle_theme"))
    )
    return {"success": True, "settings": current.to_dict()}


@api.route("/api/audit", methods=["GET"])
@admin_required
def api_audit():
    audit = _container().audit_service
    q = request.args.get("q")
    logs = audit.search(q) if q else audit.get_recent()
    return {"success": True, "logs": logs}


@api.route("/uploads/<path:filename>", methods=["GET"])
def uploaded_file(filename):
    return send_from_directory(_container().upload_dir, filename)


# ═══════════════════════════════════════════════════════════════════════════════
# MANEJO DE ERRORES
# ═══════════════════════════════════════════════════════════════════════════════

def _handle_not_found(e):
    return {"success": False, "error": str(e)}, 404


def _handle_conflict(e):
    return {
        "success": False,
        "error": ReferentialConflictError.REMEDIATION,
        "order_ids": e.order_ids,
    }, 409


def _handle_validation(e):
    return {"success": False, "error": e.message, "field": e.field}, 400


def _handle_upload(e):
    return {"success": False, "error": str(e)}, 502


def _handle_store(e):
    print(f"[ERROR] Almacenamiento no disponible: {e}")
    return {"success": False, "error": "Almacenamiento no disponible, intenta de nuevo."}, 503


def create_app(base_path: str = None) -> Flask:
    """
    Crea la aplicación Flask.

    Args:
        base_path: Directorio de datos (por defecto CATALOG_DATA_DIR)
    """
    app = Flask(__name__)

    # El contenedor es singleton por proceso; una app nueva arranca limpio
    AppContainer.reset_instance()
    get_container(base_path, SessionIdentityProvider())

    # Mide rendimiento de rutas y funciones. Logs en logs/
    # Para desactivar: CATALOG_PROFILING=0
    init_profiling(app)

    secret_key = os.environ.get("CATALOG_SECRET_KEY")
    if not secret_key:
        print("[ADVERTENCIA] CATALOG_SECRET_KEY no definida, usando clave de desarrollo")
        print("[ADVERTENCIA] Define la variable de entorno para mayor seguridad")
    app.secret_key = secret_key or _DEFAULT_SECRET

    # Configuración de cookies de sesión
    app.config.update(
        SESSION_COOKIE_HTTPONLY=True,      # Protege contra XSS
        SESSION_COOKIE_SECURE=False,       # False para HTTP local (True solo para HTTPS)
        SESSION_COOKIE_SAMESITE='Lax',     # Protección CSRF básica
        PERMANENT_SESSION_LIFETIME=86400,  # 24 horas
        MAX_CONTENT_LENGTH=MAX_UPLOAD_SIZE,
    )

    app.register_blueprint(api)

    app.register_error_handler(NotFoundError, _handle_not_found)
    app.register_error_handler(ReferentialConflictError, _handle_conflict)
    app.register_error_handler(ValidationError, _handle_validation)
    app.register_error_handler(UploadError, _handle_upload)
    app.register_error_handler(TransientStoreError, _handle_store)

    @app.after_request
    def set_security_headers(response):
        response.headers['X-Frame-Options'] = 'DENY'
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['Referrer-Policy'] = 'no-referrer-when-downgrade'
        # HSTS solo con HTTPS real
        if request.is_secure:
            response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'
        return response

    return app


if __name__ == "__main__":
    # Configuración para desarrollo local
    # En producción usar WSGI (gunicorn, waitress, etc.) con wsgi.py
    DEBUG = os.environ.get('FLASK_DEBUG', '0') == '1'
    HOST = os.environ.get('FLASK_HOST', '0.0.0.0')
    PORT = int(os.environ.get('FLASK_PORT', 5000))

    if not DEBUG:
        print(f"\n{'='*50}")
        print(f"  Servidor iniciado en http://{HOST}:{PORT}")
        print(f"  Acceso local: http://localhost:{PORT}")
        print(f"{'='*50}\n")

    create_app().run(host=HOST, port=PORT, debug=DEBUG)
