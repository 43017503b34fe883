# ==============================================================================
# PROFILING DEL PANEL
# ==============================================================================
# Tiempos por petición y por función crítica, escritos como texto legible
# en LOGS_DIR:
#
#   performance.log      una entrada por petición /api
#   slow_routes.log      peticiones que superan THRESHOLD_WARNING
#   slow_functions.log   llamadas lentas a funciones con @profile_function
#
# CATALOG_PROFILING=0 desactiva todo; CATALOG_LOGS_DIR cambia el destino.
# ==============================================================================

import os
import time
import threading
from collections import defaultdict
from datetime import datetime
from functools import wraps

# ═══════════════════════════════════════════════════════════════════════════
# CONFIGURACIÓN
# ═══════════════════════════════════════════════════════════════════════════

ENABLE_PROFILING = os.environ.get('CATALOG_PROFILING', '1') != '0'

THRESHOLD_WARNING = 300   # ms
THRESHOLD_CRITICAL = 700  # ms

LOGS_DIR = os.environ.get(
    'CATALOG_LOGS_DIR',
    os.path.join(os.path.dirname(os.path.abspath(__file__)), 'logs')
)

PERFORMANCE_LOG = 'performance.log'
SLOW_ROUTES_LOG = 'slow_routes.log'
SLOW_FUNCTIONS_LOG = 'slow_functions.log'

SEPARATOR = '─' * 40

# Nombre legible por regla de Flask
ROUTE_NAMES = {
    'GET /api/me': 'Ver sesión actual',
    'GET /api/dashboard': 'Ver panel principal',

    # Catálogo
    'GET /api/products': 'Listar productos',
    'GET /api/products/export': 'Exportar inventario CSV',
    'POST /api/products': 'Crear producto',
    'GET /api/products/<product_id>': 'Ver producto',
    'PATCH /api/products/<product_id>': 'Editar producto',
    'DELETE /api/products/<product_id>': 'Eliminar producto',
    'POST /api/products/<product_id>/archive': 'Archivar producto',
    'POST /api/uploads': 'Subir imagen',

    # Pedidos
    'GET /api/orders': 'Ver pedidos',
    'POST /api/orders': 'Registrar pedido',
    'GET /api/orders/<order_id>': 'Ver detalle de pedido',
    'POST /api/orders/<order_id>/status': 'Cambiar estado pedido',
    'DELETE /api/orders/<order_id>': 'Eliminar pedido',
    'GET /api/customers': 'Ver clientes',

    # Banners
    'GET /api/banners': 'Ver banners',
    'POST /api/banners': 'Crear banner',
    'PATCH /api/banners/<banner_id>': 'Editar banner',
    'POST /api/banners/<banner_id>/activate': 'Activar banner',
    'POST /api/banners/<banner_id>/deactivate': 'Desactivar banner',
    'DELETE /api/banners/<banner_id>': 'Eliminar banner',

    # Configuración y auditoría
    'GET /api/settings': 'Ver configuración',
    'POST /api/settings': 'Guardar configuración',
    'GET /api/audit': 'Ver auditoría',
}

# {funcion: {calls, total_time, max_time}}
_function_stats = defaultdict(lambda: {'calls': 0, 'total_time': 0.0, 'max_time': 0.0})
_stats_lock = threading.Lock()
_write_lock = threading.Lock()


# ═══════════════════════════════════════════════════════════════════════════
# ESCRITURA
# ═══════════════════════════════════════════════════════════════════════════

def _append(filename, lines):
    """Añade una entrada al log; un fallo de disco nunca llega a la petición."""
    text = '\n'.join([f"[{lines[0]}] {datetime.now():%Y-%m-%d %H:%M:%S}", SEPARATOR]
                     + lines[1:] + [SEPARATOR, ''])
    try:
        with _write_lock:
            os.makedirs(LOGS_DIR, exist_ok=True)
            with open(os.path.join(LOGS_DIR, filename), 'a', encoding='utf-8') as f:
                f.write(text)
    except OSError as e:
        print(f"[PROFILING] No se pudo escribir {filename}: {e}")


def route_label(method, rule):
    """'Editar producto' para ('PATCH', '/api/products/<product_id>')."""
    return ROUTE_NAMES.get(f"{method} {rule}", f"{method} {rule}")


def _severity(time_ms):
    if time_ms >= THRESHOLD_CRITICAL:
        return 'CRITICAL'
    if time_ms >= THRESHOLD_WARNING:
        return 'WARNING'
    return None


# ═══════════════════════════════════════════════════════════════════════════
# 1️⃣ PETICIONES
# ═══════════════════════════════════════════════════════════════════════════

def log_request(method, path, rule, status_code, time_ms, user=None):
    """
    Registra una petición en performance.log y, si fue lenta,
    también en slow_routes.log.

    Args:
        method: Verbo HTTP
        path: Ruta concreta (/api/products/3f2a...)
        rule: Regla de Flask (/api/products/<product_id>)
        status_code: Código de respuesta
        time_ms: Duración en milisegundos
        user: Email del operador, si hay sesión
    """
    if not ENABLE_PROFILING:
        return

    body = [
        f"Acción: {route_label(method, rule)}",
        f"Usuario: {user or 'anónimo'}",
        f"Ruta: {method} {path} -> {status_code}",
        f"Tiempo: {time_ms:.0f} ms",
    ]
    _append(PERFORMANCE_LOG, ['PERFORMANCE'] + body)

    level = _severity(time_ms)
    if level:
        threshold = THRESHOLD_CRITICAL if level == 'CRITICAL' else THRESHOLD_WARNING
        _append(SLOW_ROUTES_LOG, [level] + body + [f"Umbral: {threshold} ms"])


def init_profiling(app):
    """Cuelga los hooks de medición de una app Flask."""
    if not ENABLE_PROFILING:
        return

    from flask import g, request, session

    @app.before_request
    def _start_timer():
        g.start_time = time.perf_counter()

    @app.after_request
    def _log_request(response):
        started = getattr(g, 'start_time', None)
        if started is None or not request.path.startswith('/api'):
            return response

        rule = str(request.url_rule) if request.url_rule else request.path
        principal = session.get('principal') or {}
        log_request(
            request.method,
            request.path,
            rule,
            response.status_code,
            (time.perf_counter() - started) * 1000,
            principal.get('email'),
        )
        return response


# ═══════════════════════════════════════════════════════════════════════════
# 2️⃣ FUNCIONES CRÍTICAS
# ═══════════════════════════════════════════════════════════════════════════

def profile_function(func=None, name=None):
    """
    Mide cada llamada de la función decorada.

    Uso:
        @profile_function
        def filter_products(...): ...

        @profile_function(name="Estadísticas del catálogo")
        def compute_dashboard_stats(...): ...
    """
    def decorator(fn):
        if not ENABLE_PROFILING:
            return fn

        label = name or fn.__name__

        @wraps(fn)
        def wrapper(*args, **kwargs):
            start = time.perf_counter()
            try:
                return fn(*args, **kwargs)
            finally:
                _record_call(label, (time.perf_counter() - start) * 1000)

        return wrapper

    if func is not None:
        return decorator(func)
    return decorator


def _record_call(label, elapsed_ms):
    with _stats_lock:
        stats = _function_stats[label]
        stats['calls'] += 1
        stats['total_time'] += elapsed_ms
        stats['max_time'] = max(stats['max_time'], elapsed_ms)

    level = _severity(elapsed_ms)
    if level:
        _append(SLOW_FUNCTIONS_LOG, [level, f"Función: {label}", f"Tiempo: {elapsed_ms:.0f} ms"])


def get_function_stats():
    """
    Returns:
        {nombre: {'calls', 'avg_time', 'max_time'}} con tiempos en ms
    """
    with _stats_lock:
        return {
            label: {
                'calls': stats['calls'],
                'avg_time': round(stats['total_time'] / stats['calls'], 2) if stats['calls'] else 0,
                'max_time': round(stats['max_time'], 2),
            }
            for label, stats in _function_stats.items()
        }


def reset_stats():
    with _stats_lock:
        _function_stats.clear()


__all__ = [
    'ENABLE_PROFILING',
    'init_profiling',
    'log_request',
    'profile_function',
    'get_function_stats',
    'reset_stats',
]
