"""Relatório de vendas: JSON, CSV (?export=csv) e página HTML."""
import csv
from datetime import datetime
from io import StringIO
from pathlib import Path

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, StreamingResponse
from fastapi.templating import Jinja2Templates
from sqlmodel import Session

from indiejz.core.database import get_db
from indiejz.services.pricing import format_price
from indiejz.services.reports import SalesReport, build_sales_report

router = APIRouter()
# indiejz/admin/routers/reports.py -> indiejz/templates
templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent.parent / "templates"))


def _parse_date(s: str | None) -> datetime | None:
    if not s or not s.strip():
        return None
    try:
        return datetime.strptime(s.strip()[:10], "%Y-%m-%d")
    except ValueError:
        return None


def _range(date_from: str | None, date_to: str | None) -> tuple[datetime | None, datetime | None]:
    start = _parse_date(date_from)
    end = _parse_date(date_to)
    if start and end and start > end:
        start, end = end, start
    if end:
        end = end.replace(hour=23, minute=59, second=59, microsecond=999999)
    return start, end


def _report_json(report: SalesReport) -> dict:
    return {
        "total_revenue": str(report.total_revenue),
        "total_sales": report.total_sales,
        "total_discount": str(report.total_discount),
        "sales_with_coupon": report.sales_with_coupon,
        "coupon_usage": [
            {"code": u.code, "uses": u.uses, "total_discount": str(u.total_discount)} for u in report.coupon_usage
        ],
        "sales": [
            {
                "id": s.id,
                "game_id": s.game_id,
                "game_title": s.game_title,
                "user_id": s.user_id,
                "price_paid": str(s.price_paid),
                "coupon_code": s.coupon_code,
                "discount_amount": str(s.discount_amount),
                "created_at": s.created_at.isoformat() if s.created_at else None,
            }
            for s in report.sales
        ],
    }


def _report_csv(report: SalesReport, start: datetime | None, end: datetime | None) -> StreamingResponse:
    buf = StringIO()
    writer = csv.writer(buf, delimiter=";")
    writer.writerow(["data", "jogo", "usuario", "valor_pago", "cupom", "desconto"])
    for s in report.sales:
        writer.writerow([
            s.created_at.strftime("%Y-%m-%d %H:%M") if s.created_at else "",
            s.game_title,
            s.user_id,
            f"{s.price_paid:.2f}",
            s.coupon_code or "",
            f"{s.discount_amount:.2f}",
        ])
    writer.writerow([])
    writer.writerow(["Resumo"])
    writer.writerow(["Receita total", f"{report.total_revenue:.2f}"])
    writer.writerow(["Vendas", report.total_sales])
    writer.writerow(["Desconto total", f"{report.total_discount:.2f}"])
    writer.writerow(["Vendas com cupom", report.sales_with_coupon])
    for u in report.coupon_usage:
        writer.writerow([f"Cupom {u.code}", u.uses, f"{u.total_discount:.2f}"])
    label = f"{start.date() if start else 'inicio'}__{end.date() if end else 'hoje'}"
    return StreamingResponse(
        iter([buf.getvalue()]),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="vendas_{label}.csv"'},
    )


@router.get("/sales")
def sales_report(
    db: Session = Depends(get_db),
    date_from: str | None = None,
    date_to: str | None = None,
    export: str | None = None,
):
    start, end = _range(date_from, date_to)
    report = build_sales_report(db, start, end)
    if export == "csv":
        return _report_csv(report, start, end)
    return _report_json(report)


@router.get("", response_class=HTMLResponse)
@router.get("/", response_class=HTMLResponse)
def reports_page(
    request: Request,
    db: Session = Depends(get_db),
    date_from: str | None = None,
    date_to: str | None = None,
):
    start, end = _range(date_from, date_to)
    report = build_sales_report(db, start, end)
    return templates.TemplateResponse(
        request,
        "admin/sales_report.html",
        {
            "report": report,
            "date_from": start.strftime("%Y-%m-%d") if start else "",
            "date_to": end.strftime("%Y-%m-%d") if end else "",
            "fmt": format_price,
        },
    )
