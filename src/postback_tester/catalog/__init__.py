"""Catalog domain exports."""

from .backend_client import BackendApiClient, BackendApiError
from .catalog_models import (
    BettingHouse,
    DeliveryLogFilter,
    DeliveryLogSummary,
    DeliveryStatus,
    PostbackDeliveryLog,
    PostbackTemplate,
)
from .postback_catalog import (
    POSTBACK_LOGS_QUERY_KEY,
    BackendCatalog,
    CatalogError,
    InlineCatalog,
    PostbackCatalog,
    event_types,
    filter_delivery_logs,
    filter_postbacks,
    get_postback,
    house_for,
    parse_betting_house,
    parse_delivery_log,
    parse_postback_template,
    summarize_delivery_logs,
)
from .query_cache import QueryCache, RefreshScheduler

__all__ = [
    "POSTBACK_LOGS_QUERY_KEY",
    "BackendApiClient",
    "BackendApiError",
    "BackendCatalog",
    "BettingHouse",
    "CatalogError",
    "DeliveryLogFilter",
    "DeliveryLogSummary",
    "DeliveryStatus",
    "InlineCatalog",
    "PostbackCatalog",
    "PostbackDeliveryLog",
    "PostbackTemplate",
    "QueryCache",
    "RefreshScheduler",
    "event_types",
    "filter_delivery_logs",
    "filter_postbacks",
    "get_postback",
    "house_for",
    "parse_betting_house",
    "parse_delivery_log",
    "parse_postback_template",
    "summarize_delivery_logs",
]
