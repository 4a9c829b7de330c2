"""003: create listings table

The CHECK constraints are the storage-level backstop for the quantity
counters: whatever the application does, a row can never hold
current + sold != initial or a negative counter.

Revision ID: 003
Revises: 002
Create Date: 2026-09-28
"""
from typing import Sequence, Union

from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE listings (
            id                  VARCHAR(64)     PRIMARY KEY,
            name                VARCHAR(62)     NOT NULL,
            description         TEXT            NOT NULL,
            price_cents         BIGINT          NOT NULL,
            type                VARCHAR(40)     NOT NULL,
            initial_quantity    INT             NOT NULL DEFAULT 1,
            current_quantity    INT             NOT NULL,
            sold_quantity       INT             NOT NULL DEFAULT 0,
            status              VARCHAR(20)     NOT NULL DEFAULT 'Pending',
            owner_id            UUID            REFERENCES users(id) ON DELETE SET NULL,
            phone_number        VARCHAR(15),
            address             VARCHAR(255),
            city                VARCHAR(64),
            district            VARCHAR(64),
            contact_preference  VARCHAR(20),
            dimensions          VARCHAR(2),
            width               INT,
            height              INT,
            depth               INT,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),

            CONSTRAINT ck_listings_price_min CHECK (price_cents >= 10000),
            CONSTRAINT ck_listings_initial_qty CHECK (initial_quantity >= 1),
            CONSTRAINT ck_listings_current_range
                CHECK (current_quantity >= 0 AND current_quantity <= initial_quantity),
            CONSTRAINT ck_listings_sold_range
                CHECK (sold_quantity >= 0 AND sold_quantity <= initial_quantity),
            CONSTRAINT ck_listings_conservation
                CHECK (current_quantity + sold_quantity = initial_quantity),
            CONSTRAINT ck_listings_status CHECK (
                status IN ('Pending', 'For Sale', 'Confirmed', 'Cancelled', 'Sold', 'SFS')
            ),
            CONSTRAINT ck_listings_dimensions
                CHECK (dimensions IS NULL OR dimensions IN ('2D', '3D'))
        );
    """)
    op.execute("CREATE INDEX idx_listings_owner ON listings (owner_id);")
    op.execute("CREATE INDEX idx_listings_status ON listings (status);")
    op.execute("""
        CREATE TRIGGER trg_listings_updated_at
            BEFORE UPDATE ON listings
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS listings CASCADE;")
