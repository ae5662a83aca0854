"""LLM-facing tool implementations, one thin mapping per INE operation."""

from .data import ine_datos_metadata_operacion, ine_datos_serie, ine_datos_tabla
from .operations import ine_operacion, ine_operaciones_disponibles
from .variables import (
    ine_valores_hijos,
    ine_valores_variable,
    ine_valores_variable_operacion,
    ine_variables,
    ine_variables_operacion,
)
from .tables import ine_grupos_tabla, ine_tablas_operacion, ine_valores_grupos_tabla
from .series import (
    ine_serie,
    ine_serie_metadata_operacion,
    ine_series_operacion,
    ine_series_tabla,
    ine_valores_serie,
)
from .publications import (
    ine_publicacion_fecha_publicacion,
    ine_publicaciones,
    ine_publicaciones_operacion,
)
from .classifications import ine_clasificaciones, ine_clasificaciones_operacion, ine_periodicidades

__all__ = [
    "ine_datos_tabla",
    "ine_datos_serie",
    "ine_datos_metadata_operacion",
    "ine_operaciones_disponibles",
    "ine_operacion",
    "ine_variables",
    "ine_variables_operacion",
    "ine_valores_variable",
    "ine_valores_variable_operacion",
    "ine_tablas_operacion",
    "ine_grupos_tabla",
    "ine_valores_grupos_tabla",
    "ine_serie",
    "ine_series_operacion",
    "ine_valores_serie",
    "ine_series_tabla",
    "ine_serie_metadata_operacion",
    "ine_periodicidades",
    "ine_publicaciones",
    "ine_publicaciones_operacion",
    "ine_publicacion_fecha_publicacion",
    "ine_clasificaciones",
    "ine_clasificaciones_operacion",
    "ine_valores_hijos",
]
