"""Database models for the relational storage backend."""

from peewee import (
    BooleanField,
    CharField,
    DatabaseProxy,
    DateTimeField,
    DecimalField,
    IntegerField,
    Model,
    TextField,
)

from cipher_dex.core.entities import utc_now

# Bound to a concrete database by DatabaseStorage
db = DatabaseProxy()


class BaseModel(Model):
    class Meta:
        database = db


class PoolRecord(BaseModel):
    """Liquidity pool row."""
    id = CharField(primary_key=True, max_length=36)
    token_a = TextField()
    token_b = TextField()
    reserve_a = DecimalField(max_digits=36, decimal_places=18, default=0)
    reserve_b = DecimalField(max_digits=36, decimal_places=18, default=0)
    fee = IntegerField(default=30)
    total_liquidity = DecimalField(max_digits=36, decimal_places=18, default=0)
    created_at = DateTimeField(default=utc_now)

    class Meta:
        table_name = 'pools'
        indexes = (
            (('token_a', 'token_b'), False),
        )


class BalanceRecord(BaseModel):
    """Encrypted balance row, one per (wallet_address, token)."""
    id = CharField(primary_key=True, max_length=36)
    wallet_address = TextField(index=True)
    token = TextField()
    encrypted_value = TextField()
    last_updated = DateTimeField(default=utc_now)

    class Meta:
        table_name = 'balances'
        indexes = (
            (('wallet_address', 'token'), True),
        )


class TransactionRecord(BaseModel):
    """Swap/liquidity transaction row."""
    id = CharField(primary_key=True, max_length=36)
    wallet_address = TextField(index=True)
    type = TextField()
    from_token = TextField()
    to_token = TextField()
    amount = TextField()
    status = TextField(default='pending')
    tx_hash = TextField(null=True)
    timestamp = DateTimeField(default=utc_now, index=True)
    encrypted = BooleanField(default=True)

    class Meta:
        table_name = 'transactions'


class LimitOrderRecord(BaseModel):
    """Limit order row."""
    id = CharField(primary_key=True, max_length=36)
    wallet_address = TextField(index=True)
    token_in = TextField()
    token_out = TextField()
    amount_in = DecimalField(max_digits=36, decimal_places=18)
    limit_price = DecimalField(max_digits=36, decimal_places=18)
    status = TextField(default='active', index=True)
    created_at = DateTimeField(default=utc_now, index=True)
    executed_at = DateTimeField(null=True)

    class Meta:
        table_name = 'limit_orders'


ALL_MODELS = [PoolRecord, BalanceRecord, TransactionRecord, LimitOrderRecord]
