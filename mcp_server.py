"""
Local MCP server for the dairy records store.

This exposes the dashboard, chart, report and record CRUD operations as
FastMCP tools. Every tool returns an MCP content array holding one JSON text
item; failures are reported as {"error": "..."} payloads rather than raised.
"""
import json
import logging
from datetime import date
from typing import Any, Dict, Optional

from fastmcp import FastMCP

from models.aggregation import dashboard_summary, last_7_days_series
from models.animals import all_animals, delete_animal, save_animal
from models.chart import bar_chart
from models.customers import all_customers, delete_customer, save_customer
from models.expenses import all_expenses, delete_expense, save_expense
from models.milk import all_milk, delete_milk_entry, save_milk_entry
from models.reports import build_report
from utils.file_manager import RecordStore, load_config

LOG = logging.getLogger(__name__)

server_instructions = """
This MCP server provides access to a local dairy record store: animals, milk
collection entries, customers and expenses. It can summarise today's and this
month's figures, build a monthly report and describe the 7-day milk chart.
"""

_LISTERS = {
    "animals": all_animals,
    "milk": all_milk,
    "customers": all_customers,
    "expenses": all_expenses,
}

_DELETERS = {
    "animals": delete_animal,
    "milk": delete_milk_entry,
    "customers": delete_customer,
    "expenses": delete_expense,
}


def _content(payload: Dict[str, Any]) -> Dict[str, Any]:
    return {"content": [{"type": "text", "text": json.dumps(payload)}]}


def _save(store: RecordStore, collection: str, data: Dict[str, Any]):
    if collection == "animals":
        return save_animal(store, data)
    if collection == "customers":
        return save_customer(store, data)
    if collection == "milk":
        return save_milk_entry(store, data, date.today())
    if collection == "expenses":
        return save_expense(store, data, date.today())
    raise ValueError(f"Unknown collection: {collection}")


class DairyTools:
    """Tool bodies over one store; each returns the JSON payload of a tool."""

    def __init__(self, store: RecordStore, data_dir: Optional[str] = None):
        self.store = store
        self.data_dir = data_dir

    def dashboard(self, today: Optional[date] = None) -> Dict[str, Any]:
        return {"dashboard": dashboard_summary(self.store, today or date.today())}

    def milk_chart(self, width: float, height: float, ratio: float,
                   today: Optional[date] = None) -> Dict[str, Any]:
        series = last_7_days_series(all_milk(self.store), today or date.today())
        commands = bar_chart(series, width, height, ratio)
        return {
            "series": [{"label": label, "value": value} for label, value in series],
            "commands": [c.to_dict() for c in commands],
        }

    def monthly_report(self, month: str) -> Dict[str, Any]:
        rate = float(load_config(self.data_dir)["pricing"]["milk_rate_per_liter"])
        try:
            report = build_report(month, all_milk(self.store), all_expenses(self.store), rate)
        except ValueError as e:
            return {"error": str(e)}
        return {"report": report.to_dict()}

    def list_records(self, collection: str) -> Dict[str, Any]:
        lister = _LISTERS.get(collection)
        if lister is None:
            return {"error": f"Unknown collection: {collection}"}
        return {collection: [r.to_dict() for r in lister(self.store)]}

    def save_record(self, collection: str, arg: str) -> Dict[str, Any]:
        try:
            data = json.loads(arg) if arg else {}
        except json.JSONDecodeError:
            return {"error": "Invalid JSON argument"}
        if not isinstance(data, dict):
            return {"error": "Expected a JSON object"}
        try:
            record = _save(self.store, collection, data)
        except ValueError as e:
            return {"error": str(e)}
        if record is None:
            return {"error": f"Unknown id: {data.get('id')}"}
        return {"record": record.to_dict()}

    def delete_record(self, collection: str, record_id: str) -> Dict[str, Any]:
        deleter = _DELETERS.get(collection)
        if deleter is None:
            return {"error": f"Unknown collection: {collection}"}
        return {"deleted": deleter(self.store, record_id)}


def create_server(data_dir: Optional[str] = None) -> FastMCP:
    mcp = FastMCP(name="Dairy Records Local MCP", instructions=server_instructions)
    tools = DairyTools(RecordStore.from_config(data_dir), data_dir)

    @mcp.tool()
    async def dashboard() -> Dict[str, Any]:
        """
        Return today's dashboard figures.

        Includes the number of animals and customers, today's milk in liters,
        this month's milk and expenses, and the five most recently stored
        milk entries.
        """
        return _content(tools.dashboard())

    @mcp.tool()
    async def milk_chart(width: float = 600, height: float = 300, ratio: float = 1.0) -> Dict[str, Any]:
        """
        Return the last 7 days of milk totals and the bar chart draw commands.

        Commands are in logical units for a surface of `width` x `height`; the
        leading resize/scale pair accounts for `ratio` (device pixel ratio).

        Edge cases:
            - A zero, negative or non-finite size yields an empty command list.
        """
        return _content(tools.milk_chart(width, height, ratio))

    @mcp.tool()
    async def monthly_report(month: str) -> Dict[str, Any]:
        """
        Build the report for a YYYY-MM month.

        Returns total milk, total expenses, estimated income at the configured
        rate per liter, net profit and the month's expense lines.

        Edge cases:
            - An invalid month returns an error payload.
        """
        return _content(tools.monthly_report(month))

    @mcp.tool()
    async def list_records(collection: str) -> Dict[str, Any]:
        """
        Return every record of a collection: animals, milk, customers or expenses.
        """
        return _content(tools.list_records(collection))

    @mcp.tool()
    async def save_record(collection: str, arg: str) -> Dict[str, Any]:
        """
        Insert or update a record.

        `arg` is a JSON object using the stored field names, e.g.
        {"tagId": "A-12", "type": "Cow", "breed": "Sahiwal"} for animals or
        {"animalId": "...", "qty": 6.5, "shift": "Morning"} for milk. Animals
        and customers with an "id" are replaced; milk entries and expenses are
        always added.

        Edge cases:
            - Invalid JSON or failed validation returns an error payload.
        """
        return _content(tools.save_record(collection, arg))

    @mcp.tool()
    async def delete_record(collection: str, record_id: str) -> Dict[str, Any]:
        """
        Delete one record by id. Deleting an animal keeps its milk entries.
        """
        return _content(tools.delete_record(collection, record_id))

    return mcp


def main():
    cfg = load_config()
    logging.basicConfig(level=cfg["logging"]["level"])
    server = create_server()
    LOG.info("Starting local MCP server on 127.0.0.1:8000 (HTTP)")
    server.run(transport="http", host="127.0.0.1", port=8000, path="/mcp")


if __name__ == "__main__":
    main()
