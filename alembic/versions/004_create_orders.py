"""004: create orders + order_items tables

order_items carries a frozen snapshot of the listing and its seller; it does
not reference listings by foreign key, so removing a listing out-of-band
never takes order history with it.

Revision ID: 004
Revises: 003
Create Date: 2026-09-28
"""
from typing import Sequence, Union

from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE orders (
            id                  VARCHAR(16)     PRIMARY KEY,
            status              VARCHAR(20)     NOT NULL DEFAULT 'placed',
            customer_info       JSONB           NOT NULL,
            notes               TEXT,
            shipment_fee_cents  BIGINT          NOT NULL,
            total_price_cents   BIGINT          NOT NULL,
            cadre_profit_cents  BIGINT          NOT NULL,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),

            CONSTRAINT ck_orders_status CHECK (
                status IN ('placed', 'out for delivery', 'delivered', 'cancelled')
            ),
            CONSTRAINT ck_orders_amounts CHECK (
                shipment_fee_cents >= 0 AND total_price_cents >= 0 AND cadre_profit_cents >= 0
            )
        );
    """)
    op.execute("CREATE INDEX idx_orders_created ON orders (created_at DESC, id DESC);")
    op.execute("CREATE INDEX idx_orders_status ON orders (status);")
    op.execute("""
        CREATE TRIGGER trg_orders_updated_at
            BEFORE UPDATE ON orders
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)

    op.execute("""
        CREATE TABLE order_items (
            order_id            VARCHAR(16)     NOT NULL REFERENCES orders(id) ON DELETE CASCADE,
            listing_id          VARCHAR(64)     NOT NULL,
            line_no             INT             NOT NULL,
            name                VARCHAR(62)     NOT NULL,
            description         TEXT            NOT NULL,
            price_cents         BIGINT          NOT NULL,
            type                VARCHAR(40)     NOT NULL,
            seller_info         JSONB           NOT NULL,
            quantity            INT             NOT NULL,
            profit_cents        BIGINT          NOT NULL,
            selected_size       VARCHAR(10),
            dimensions          VARCHAR(2),
            width               INT,
            height              INT,
            depth               INT,
            item_received       BOOLEAN         NOT NULL DEFAULT FALSE,
            item_verified       BOOLEAN         NOT NULL DEFAULT FALSE,
            item_packed         BOOLEAN         NOT NULL DEFAULT FALSE,
            ready_for_shipment  BOOLEAN         NOT NULL DEFAULT FALSE,

            PRIMARY KEY (order_id, listing_id),
            CONSTRAINT uq_order_items_line UNIQUE (order_id, line_no),
            CONSTRAINT ck_order_items_quantity CHECK (quantity >= 1),
            CONSTRAINT ck_order_items_line_no CHECK (line_no >= 1)
        );
    """)
    op.execute("CREATE INDEX idx_order_items_listing ON order_items (listing_id);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS order_items CASCADE;")
    op.execute("DROP TABLE IF EXISTS orders CASCADE;")
