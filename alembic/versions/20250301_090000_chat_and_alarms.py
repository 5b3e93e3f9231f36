"""chat rooms, messages, alarms and block list

Revision ID: 20250301_090000
Revises:
Create Date: 2025-03-01 09:00:00.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "20250301_090000"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


message_type_enum = sa.Enum("TEXT", "IMAGE", "URL", name="message_type")
item_category_enum = sa.Enum(
    "HOME_APPLIANCE",
    "HEALTH_FOOD",
    "BEAUTY",
    "FOOD_PROCESSED",
    "PET",
    "DIGITAL",
    "LIVING_KITCHEN",
    "WOMEN_ACC",
    "SPORTS",
    "PLANT",
    "GAME_HOBBY",
    "TICKET",
    "FURNITURE",
    "BOOK",
    "KIDS",
    "CLOTHES",
    "ETC",
    name="item_category",
)
trade_method_enum = sa.Enum("SHIPPING", "IN_PERSON", "OTHER", name="trade_method")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("nickname", sa.String(length=60), nullable=False),
        sa.Column("profile_image", sa.String(length=500), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "items",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("seller_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("winner_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("image_url", sa.String(length=500), nullable=True),
        sa.Column("current_price", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("category", item_category_enum, nullable=False, server_default="ETC"),
        sa.Column("trade_method", trade_method_enum, nullable=False, server_default="OTHER"),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "chat",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("seller_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("buyer_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("item_id", sa.Integer(), sa.ForeignKey("items.id"), nullable=False),
        sa.Column("last_message_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("seller_deleted_at", sa.DateTime(), nullable=True),
        sa.Column("buyer_deleted_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.UniqueConstraint("item_id", "seller_id", "buyer_id", name="uk_chat_item_seller_buyer"),
    )
    op.create_index("ix_chat_last_message_at", "chat", ["last_message_at"])

    op.create_table(
        "message",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("chat_id", sa.Integer(), sa.ForeignKey("chat.id", ondelete="CASCADE"), nullable=False),
        sa.Column("sender_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("content", sa.String(length=300), nullable=False),
        sa.Column("type", message_type_enum, nullable=False, server_default="TEXT"),
        sa.Column("sent_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_message_chat_sent", "message", ["chat_id", "sent_at"])

    op.create_table(
        "alarm",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("read_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_alarm_user_read", "alarm", ["user_id", "is_read"])

    op.create_table(
        "block_list",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("blocker_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("blocked_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("blocker_id", "blocked_id", name="uq_block_list_pair"),
    )


def downgrade() -> None:
    op.drop_table("block_list")
    op.drop_index("ix_alarm_user_read", table_name="alarm")
    op.drop_table("alarm")
    op.drop_index("ix_message_chat_sent", table_name="message")
    op.drop_table("message")
    op.drop_index("ix_chat_last_message_at", table_name="chat")
    op.drop_table("chat")
    op.drop_table("items")
    op.drop_table("users")
    bind = op.get_bind()
    message_type_enum.drop(bind, checkfirst=True)
    item_category_enum.drop(bind, checkfirst=True)
    trade_method_enum.drop(bind, checkfirst=True)
