# backend/remitos/domain/constants.py

"""
Single source for the business constants shared by services and routers.
"""

from typing import Final

# Catalog
CODE_CAP: Final[int] = 3

# Counters (sequence name -> value before the first allocation)
COUNTER_NOTE_NUMBER: Final[str] = "note-number"
COUNTER_ORDER_ID: Final[str] = "order-id"
COUNTER_BRANCH_ID: Final[str] = "branch-id"
COUNTER_PRODUCT_ID: Final[str] = "product-id"
COUNTER_SEEDS: Final[dict] = {
    COUNTER_NOTE_NUMBER: 3804,
    COUNTER_ORDER_ID: 0,
    COUNTER_BRANCH_ID: 0,
    COUNTER_PRODUCT_ID: 0,
}

# Notes
DEFAULT_ORIGIN: Final[str] = "Juan Manuel de Rosas 1325"
STATUS_PENDING: Final[str] = "pending"
STATUS_OK: Final[str] = "ok"
STATUS_DISCREPANCY: Final[str] = "discrepancy"
CLOSE_ACTIONS: Final[tuple] = (STATUS_OK, STATUS_DISCREPANCY)

PUBLIC_URL: Final[str] = "/r/{}"
DOCUMENT_NAME: Final[str] = "remito_{}.pdf"
DOCUMENT_URL: Final[str] = "/pdf/{}"
SHARE_TEXT: Final[str] = "Remito {} {}"
WHATSAPP_BASE: Final[str] = "https://wa.me/"
WHATSAPP_PREFIX: Final[str] = "549"

# Orders
ORDER_DRAFT: Final[str] = "draft"
ORDER_PROCESSED: Final[str] = "processed"

# Product search
SEARCH_LIMIT_DEFAULT: Final[int] = 50
SEARCH_LIMIT_MAX: Final[int] = 500

# Document header
COMPANY_LINES: Final[tuple] = (
    "Empresa: Gonzalo Herna Yelmo Beltran",
    "CUIT: 20-30743247-2",
    "Actividad: Transporte de mercadería entre sucursales",
)

# Default branch directory (installed by seed when empty)
SEED_BRANCHES: Final[tuple] = (
    {"name": "Adrogué",          "address": "Av. Hipólito Yrigoyen 13298, Adrogué"},
    {"name": "Avellaneda Local", "address": "Güemes 897, Alto Avellaneda, Avellaneda"},
    {"name": "Avellaneda Stand", "address": "Güemes 897, Alto Avellaneda (Stand), Avellaneda"},
    {"name": "Banfield Outlet",  "address": "Av. Larroque, Banfield"},
    {"name": "Brown",            "address": "Av. Fernández de la Cruz 4602, Factory Parque Brown, CABA"},
    {"name": "Lomas",            "address": "Av. Antártida Argentina 799, Portal Lomas, Lomas de Zamora"},
    {"name": "Martínez Local",   "address": "Paraná 3745, Unicenter, Martínez"},
    {"name": "Martínez Stand",   "address": "Paraná 3745, Unicenter (Stand), Martínez"},
    {"name": "Plaza Oeste",      "address": "Av. Vergara, Morón"},
    {"name": "Abasto",           "address": "Av. Corrientes 3247, CABA"},
)
