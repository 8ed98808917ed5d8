"""SQLAlchemy table definitions for the cargo scanner database.

Tables are defined with SQLAlchemy Core (NOT ORM) as metadata for schema
generation and query building.
"""

from sqlalchemy import (
    MetaData,
    Table,
    Column,
    Integer,
    String,
    Float,
    DateTime,
    Boolean,
    CheckConstraint,
    ForeignKey,
)

# MetaData object for all table definitions
metadata = MetaData()

# Held cargo, one row per commodity
cargo_items = Table(
    'cargo_items',
    metadata,
    Column('commodity_id', String, primary_key=True),
    Column('quantity_scu', Float, nullable=False),
    Column('updated_at', DateTime(timezone=True), nullable=False),
    CheckConstraint('quantity_scu > 0', name='ck_cargo_items_positive_quantity'),
)

# Saved profitability params (single row keyed by settings_id)
profitability_settings = Table(
    'profitability_settings',
    metadata,
    Column('settings_id', String, primary_key=True),
    Column('risk_pct', Float, nullable=False),
    Column('crew_hourly', Float, nullable=False),
    Column('crew_size', Integer, nullable=False),
    Column('time_minutes', Float, nullable=False),
    Column('updated_at', DateTime(timezone=True), nullable=False),
)

# Price cache entries, one row per commodity fetch
price_cache_entries = Table(
    'price_cache_entries',
    metadata,
    Column('commodity_id', String, primary_key=True),
    Column('fetched_at', DateTime(timezone=True), nullable=False),
)

# Price points of a cached entry
price_points = Table(
    'price_points',
    metadata,
    Column('commodity_id', String, ForeignKey('price_cache_entries.commodity_id'), primary_key=True),
    Column('location_id', String, primary_key=True),
    Column('observed_at', DateTime(timezone=True), nullable=False),
    Column('sell_price_per_scu', Float),
    Column('buy_price_per_scu', Float),
    Column('stock_scu', Float),
    Column('buy_stock_scu', Float),
    Column('sell_demand', String, nullable=False),
    Column('buy_demand', String, nullable=False),
    Column('volatility', Float),
    Column('location_name', String, nullable=False, default=''),
    Column('system', String),
    Column('armistice', Boolean, nullable=False, default=False),
)

# Cached commodities list
cached_commodities = Table(
    'cached_commodities',
    metadata,
    Column('commodity_id', String, primary_key=True),
    Column('name', String, nullable=False),
    Column('category', String, nullable=False),
    Column('code', String),
    Column('fetched_at', DateTime(timezone=True), nullable=False),
)
