from typing import Dict, Type

from .base import Engine
from .duckdb_engine import DuckDBEngine
from .pandas_engine import PandasEngine
from .polars_engine import PolarsEngine
from .python import PythonEngine

ENGINE_CLASSES: Dict[str, Type[Engine]] = {
    cls.name: cls for cls in (PythonEngine, PandasEngine, PolarsEngine, DuckDBEngine)
}


def create_engine(records, index, config) -> Engine:
    return ENGINE_CLASSES[config.engine](records, index, config)


__all__ = ["Engine", "ENGINE_CLASSES", "create_engine"]
