"""Relatório de vendas: receita, descontos e uso de cupons a partir das compras registradas."""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from sqlmodel import Session, select

from indiejz.models import Game, Purchase
from indiejz.services.pricing import ZERO, to_money


@dataclass
class CouponUsage:
    code: str
    uses: int = 0
    total_discount: Decimal = ZERO


@dataclass
class SalesRow:
    id: int
    game_id: int
    game_title: str
    user_id: int
    price_paid: Decimal
    coupon_code: str | None
    discount_amount: Decimal
    created_at: datetime


@dataclass
class SalesReport:
    total_revenue: Decimal = ZERO
    total_sales: int = 0
    total_discount: Decimal = ZERO
    sales_with_coupon: int = 0
    coupon_usage: list[CouponUsage] = field(default_factory=list)
    sales: list[SalesRow] = field(default_factory=list)


def build_sales_report(db: Session, start: datetime | None = None, end: datetime | None = None) -> SalesReport:
    stmt = select(Purchase, Game.title).join(Game, Game.id == Purchase.game_id, isouter=True)
    if start is not None:
        stmt = stmt.where(Purchase.created_at >= start)
    if end is not None:
        stmt = stmt.where(Purchase.created_at <= end)
    stmt = stmt.order_by(Purchase.created_at.desc(), Purchase.id.desc())

    report = SalesReport()
    usage: dict[str, CouponUsage] = {}
    for purchase, title in db.exec(stmt).all():
        price = to_money(purchase.price_paid)
        disc = to_money(purchase.discount_amount)
        report.total_revenue += price
        report.total_discount += disc
        report.total_sales += 1
        if purchase.coupon_code:
            report.sales_with_coupon += 1
            entry = usage.setdefault(purchase.coupon_code, CouponUsage(code=purchase.coupon_code))
            entry.uses += 1
            entry.total_discount += disc
        report.sales.append(
            SalesRow(
                id=purchase.id or 0,
                game_id=purchase.game_id,
                game_title=title or "-",
                user_id=purchase.user_id,
                price_paid=price,
                coupon_code=purchase.coupon_code,
                discount_amount=disc,
                created_at=purchase.created_at,
            )
        )
    report.coupon_usage = sorted(usage.values(), key=lambda u: (-u.uses, u.code))
    return report
