# ==============================================================================
# SERVICIO DE SUBIDA DE IMÁGENES
# ==============================================================================
# Guarda imágenes en un almacén de objetos y devuelve una URL pública.
# La implementación local escribe en disco y sirve desde /uploads.
#
# Una subida fallida no deja rastro en el producto: la URL solo se agrega
# a la galería cuando upload() retornó con éxito.
# ==============================================================================

import os
import uuid
from typing import Optional

from werkzeug.utils import secure_filename

from catalog_admin.errors import UploadError


ALLOWED_EXTENSIONS = {"png", "jpg", "jpeg", "gif", "webp"}


def allowed_file(filename: Optional[str]) -> bool:
    return bool(filename) and "." in filename and filename.rsplit(".", 1)[1].lower() in ALLOWED_EXTENSIONS


class LocalImageUploader:
    """
    Almacén de imágenes en disco local.

    Cada archivo recibe un prefijo uuid para evitar colisiones de nombre.
    """

    def __init__(self, upload_dir: str, public_base_url: str = '/uploads'):
        self.upload_dir = upload_dir
        self.public_base_url = public_base_url.rstrip('/')

    def upload(self, data: bytes, suggested_name: str) -> str:
        """
        Args:
            data: Contenido binario de la imagen
            suggested_name: Nombre original del archivo

        Returns:
            URL pública de la imagen guardada

        Raises:
            UploadError: Formato no permitido, archivo vacío o fallo de escritura
        """
        if not allowed_file(suggested_name):
            raise UploadError(f"Formato de imagen no permitido: {suggested_name}")
        if not data:
            raise UploadError("El archivo está vacío")

        filename = secure_filename(suggested_name) or f"imagen.{suggested_name.rsplit('.', 1)[1].lower()}"
        unique_name = f"{uuid.uuid4().hex}_{filename}"
        save_path = os.path.join(self.upload_dir, unique_name)
        try:
            os.makedirs(self.upload_dir, exist_ok=True)
            with open(save_path, 'wb') as f:
                f.write(data)
        except OSError as e:
            raise UploadError(f"Error al guardar la imagen: {e}")

        print(f"[UPLOAD] Imagen guardada: {unique_name}")
        return f"{self.public_base_url}/{unique_name}"
