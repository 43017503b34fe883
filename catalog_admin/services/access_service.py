# ==============================================================================
# SERVICIO DE ACCESO - Resolución de rol
# ==============================================================================
# Convierte la identidad entregada por el proveedor externo en la única
# capacidad que distingue el panel: administrador o no.
#
# REGLA:
# admin = correo del dominio organizacional  O  rol declarado "admin"
#
# Función total: nunca lanza excepción; identidad ausente o incompleta → False.
# El resultado no se persiste; se recalcula en cada carga de sesión.
# ==============================================================================

import os
from typing import Any, Mapping, Optional, Union

from catalog_admin.models import Principal
from catalog_admin.repositories.interfaces import IIdentityProvider


# Dominio organizacional por defecto (configurable por entorno)
DEFAULT_ADMIN_EMAIL_DOMAIN = 'tmax.com'

ROLE_ADMIN = 'admin'

Identity = Union[Principal, Mapping[str, Any], None]


def to_principal(identity: Identity) -> Optional[Principal]:
    """
    Acepta un Principal o un registro tipo diccionario del proveedor
    ({"email", "role" | "role_claim" | "user_metadata": {"role"}}).
    """
    if identity is None or isinstance(identity, Principal):
        return identity
    if not isinstance(identity, Mapping):
        return None

    role = identity.get('role_claim') or identity.get('role')
    metadata = identity.get('user_metadata')
    if not role and isinstance(metadata, Mapping):
        role = metadata.get('role')

    email = identity.get('email')
    return Principal(
        email=email if isinstance(email, str) else None,
        role_claim=role if isinstance(role, str) else None
    )


def email_in_domain(email: Optional[str], domain: str) -> bool:
    """
    Verifica que el dominio del correo sea exactamente el indicado.
    "a@tmax.com" coincide con "tmax.com"; "a@evil-tmax.com" no.
    """
    if not isinstance(email, str) or '@' not in email or not domain:
        return False
    return email.strip().lower().endswith('@' + domain.strip().lower().lstrip('@'))


def is_admin(identity: Identity, admin_domain: str = DEFAULT_ADMIN_EMAIL_DOMAIN) -> bool:
    """
    Resuelve la capacidad de administrador.

    Args:
        identity: Principal, registro del proveedor o None (anónimo)
        admin_domain: Sufijo de correo organizacional

    Returns:
        True si es administrador
    """
    principal = to_principal(identity)
    if principal is None:
        return False
    if email_in_domain(principal.email, admin_domain):
        return True
    # El rol se compara tal cual lo entrega el proveedor
    return principal.role_claim == ROLE_ADMIN


class AccessService:
    """
    Servicio de acceso.

    Responsabilidades:
    - Resolver si el principal actual es administrador
    - Exponer el principal actual a la capa HTTP
    """

    def __init__(
        self,
        identity_provider: Optional[IIdentityProvider] = None,
        admin_domain: Optional[str] = None
    ):
        self.identity_provider = identity_provider
        self.admin_domain = (
            admin_domain
            or os.environ.get('ADMIN_EMAIL_DOMAIN')
            or DEFAULT_ADMIN_EMAIL_DOMAIN
        )

    def is_admin(self, identity: Identity) -> bool:
        return is_admin(identity, self.admin_domain)

    def current_principal(self) -> Optional[Principal]:
        if self.identity_provider is None:
            return None
        return self.identity_provider.get_current_principal()

    def current_is_admin(self) -> bool:
        """Capacidad del principal actual (anónimo → False)."""
        return self.is_admin(self.current_principal())
