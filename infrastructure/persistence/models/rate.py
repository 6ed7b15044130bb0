from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Index, Integer, Numeric, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
	pass


class AverageRateDB(Base):
	__tablename__ = 'average_rates'

	id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
	currency: Mapped[str] = mapped_column(String(3), nullable=False)
	buy_rate: Mapped[Decimal] = mapped_column(Numeric(precision=12, scale=2), nullable=False)
	sell_rate: Mapped[Decimal] = mapped_column(Numeric(precision=12, scale=2), nullable=False)
	timestamp: Mapped[datetime] = mapped_column(DateTime, nullable=False)

	__table_args__ = (
		Index('idx_average_rates_currency_timestamp', 'currency', 'timestamp'),
	)
