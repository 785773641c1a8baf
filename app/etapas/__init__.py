"""CUIPO enrichment stages.

Each ``parteN`` module fills a group of derived columns of the working
table from the execution snapshot and the reference tables.  Use
``app.etapas.orquestador`` to run them with dependency checks.
"""

from app.etapas.base_etapa import BaseEtapa, EtapaResult, PasoResult
from app.etapas.orquestador import (
    ETAPAS,
    EjecucionPipeline,
    describir_etapas,
    ejecutar_etapa,
    ejecutar_todo,
    orden_topologico,
)

__all__ = [
    "BaseEtapa",
    "EtapaResult",
    "PasoResult",
    "ETAPAS",
    "EjecucionPipeline",
    "describir_etapas",
    "ejecutar_etapa",
    "ejecutar_todo",
    "orden_topologico",
]
