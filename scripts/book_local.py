#!/usr/bin/env python3
"""
Interactive local booking harness.

Usage:
  python3 scripts/book_local.py

What it does:
- Runs the booking flow (calendar, time slots, contact form, submission) in the terminal
- Talks to BOOKING_API_URL when set, otherwise to the in-process API with the mock provider
- /dual switches to the design + launch meeting pair (launch at least a week after design)
- Prints the API debug log on request
"""

from __future__ import annotations

import asyncio
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import httpx
from dotenv import load_dotenv

load_dotenv()
if not os.getenv("BOOKING_API_URL"):
    os.environ.setdefault("ACUITY_USE_MOCK", "true")

from portal.client.api_log import ApiLog
from portal.client.booking_api import BookingApiClient
from portal.client.debug_log import render_log
from portal.client.pickers import DateTimePicker, DualMeetingPicker
from portal.client.submission import BookingSubmissionFlow, Step


def _build_client(api_log: ApiLog) -> BookingApiClient:
    base_url = os.getenv("BOOKING_API_URL")
    if base_url:
        return BookingApiClient(base_url, api_log=api_log)

    from portal.main import app

    transport = httpx.ASGITransport(app=app)
    client = httpx.AsyncClient(transport=transport, base_url="http://portal.local")
    return BookingApiClient("http://portal.local", api_log=api_log, client=client)


def _print_header() -> None:
    print("\nLocal Booking Harness")
    print("-" * 60)
    print("Commands: /next, /prev, /date YYYY-MM-DD, /time N, /form, /submit,")
    print("          /back, /log, /clear, /new, /quit, /help")
    print("Dual meetings: /dual, /design, /launch, /single")
    print("-" * 60)


def _print_calendar(picker: DateTimePicker) -> None:
    calendar = picker.calendar
    print(f"\n{calendar.view_month.strftime('%B %Y')}  [{calendar.fetch_state.value}]")
    if calendar.error:
        print(f"  error: {calendar.error} (type /retry)")
    print(" Sun Mon Tue Wed Thu Fri Sat")
    row = []
    for cell in calendar.grid():
        if cell is None:
            row.append("    ")
        else:
            mark = "*" if cell.selected else ("+" if cell.selectable else " ")
            row.append(f"{cell.day.day:>3}{mark}")
        if len(row) == 7:
            print("".join(row))
            row = []
    if row:
        print("".join(row))
    print("(+ selectable, * selected)")


def _print_slots(picker: DateTimePicker) -> None:
    slots = picker.time_slots
    if slots is None:
        return
    print(f"\nTimes for {slots.date}  [{slots.fetch_state.value}]")
    if slots.error:
        print(f"  error: {slots.error}")
    if slots.empty_message:
        print(f"  {slots.empty_message}")
    for index, slot in enumerate(slots.slots, start=1):
        mark = "*" if slot.datetime == slots.selected_time else " "
        print(f"  {index:>2}{mark} {slot.datetime}")


def _fill_form(flow: BookingSubmissionFlow) -> None:
    form = flow.form
    form.first_name = input("First name: ").strip() or form.first_name
    form.last_name = input("Last name: ").strip() or form.last_name
    form.email = input("Email: ").strip() or form.email
    form.phone = input("Phone (digits): ").strip() or form.phone
    form.notes = input("Notes (optional): ").strip() or form.notes
    if not flow.validate():
        for name, message in flow.form.errors.items():
            print(f"  {name}: {message}")


class _Selection:
    """Either a single picker or the design/launch pair, plus which side the commands act on."""

    def __init__(self, api: BookingApiClient, flow: BookingSubmissionFlow) -> None:
        self._api = api
        self._flow = flow
        self.single = DateTimePicker(api, on_datetime_selected=flow.choose_datetime, on_error=flow.show_error)
        self.dual: DualMeetingPicker | None = None
        self.side = "design"

    @property
    def picker(self) -> DateTimePicker | None:
        if self.dual is None:
            return self.single
        if self.side == "launch":
            return self.dual.launch if self.dual.launch_enabled else None
        return self.dual.design

    def label(self) -> str:
        return "single" if self.dual is None else f"dual/{self.side}"

    async def use_dual(self) -> None:
        self.dual = DualMeetingPicker(
            self._api,
            on_dates_selected=self._flow.choose_meetings,
            on_error=self._flow.show_error,
        )
        self.side = "design"
        await self.dual.start()

    async def use_single(self) -> None:
        self.dual = None
        self.single.reset()
        await self.single.start()

    async def select_date(self, day: str) -> bool:
        if self.dual is None:
            return await self.single.select_date(day)
        if self.side == "launch":
            return await self.dual.select_launch_date(day)
        return await self.dual.select_design_date(day)

    async def select_time(self, datetime: str) -> bool:
        if self.dual is None:
            return self.single.select_time(datetime)
        if self.side == "launch":
            return self.dual.select_launch_time(datetime)
        return await self.dual.select_design_time(datetime)

    async def restart(self) -> None:
        if self.dual is None:
            self.single.reset()
            await self.single.start()
        else:
            await self.use_dual()


async def main() -> None:
    api_log = ApiLog()
    api = _build_client(api_log)
    flow = BookingSubmissionFlow(api, on_close=lambda: print("Closed."))
    selection = _Selection(api, flow)

    _print_header()
    await selection.picker.start()
    _print_calendar(selection.picker)

    try:
        while True:
            try:
                text = input(f"\n[{selection.label()}] > ").strip()
            except (EOFError, KeyboardInterrupt):
                print("\nBye!")
                return

            if not text:
                continue
            cmd, _, arg = text.partition(" ")
            cmd = cmd.lower()
            picker = selection.picker

            if cmd in ("/quit", "/exit"):
                print("Bye!")
                return
            if cmd == "/help":
                _print_header()
            elif cmd == "/dual":
                flow.schedule_another()
                await selection.use_dual()
                print("Dual mode: pick the design meeting, then /launch for the launch meeting.")
                _print_calendar(selection.picker)
            elif cmd == "/single":
                flow.schedule_another()
                await selection.use_single()
                _print_calendar(selection.picker)
            elif cmd in ("/design", "/launch"):
                if selection.dual is None:
                    print("Only available in dual mode (/dual).")
                    continue
                selection.side = cmd[1:]
                if selection.picker is None:
                    print("Pick a design date and time first.")
                    selection.side = "design"
                    continue
                if cmd == "/launch":
                    print(f"Launch must be on or after {selection.dual.launch_min_date}.")
                _print_calendar(selection.picker)
                _print_slots(selection.picker)
            elif picker is None:
                print("Pick a design date and time first.")
            elif cmd == "/next":
                await picker.calendar.next_month()
                _print_calendar(picker)
            elif cmd == "/prev":
                await picker.calendar.previous_month()
                _print_calendar(picker)
            elif cmd == "/retry":
                await picker.calendar.try_again()
                _print_calendar(picker)
            elif cmd == "/date":
                try:
                    ok = await selection.select_date(arg.strip())
                except ValueError:
                    ok = False
                if not ok:
                    print("That date is not selectable.")
                _print_slots(picker)
            elif cmd == "/time":
                slots = picker.time_slots.slots if picker.time_slots else []
                if not arg.strip().isdigit() or not 1 <= int(arg) <= len(slots):
                    print("Pick a time by its number.")
                    continue
                await selection.select_time(slots[int(arg) - 1].datetime)
                if selection.dual is not None and selection.side == "design":
                    print(f"Design meeting {picker.selected_datetime}; type /launch to pick the launch meeting.")
                else:
                    print(f"Selected {flow.selected_datetime}; step: {flow.step.value}")
                if flow.launch_datetime:
                    print(f"Launch meeting {flow.launch_datetime} (not booked by this flow)")
            elif cmd == "/form":
                _fill_form(flow)
            elif cmd == "/submit":
                confirmation = await flow.submit()
                if confirmation:
                    print(f"\nBooked appointment #{confirmation.appointment_id} at {confirmation.datetime}")
                    print(confirmation.message)
                elif flow.error:
                    print(f"  {flow.error}")
                else:
                    for name, message in flow.form.errors.items():
                        print(f"  {name}: {message}")
            elif cmd == "/back":
                if flow.go_back():
                    await selection.restart()
                    _print_calendar(selection.picker)
                else:
                    print("Nothing to go back to.")
            elif cmd == "/new":
                flow.schedule_another()
                await selection.restart()
                _print_calendar(selection.picker)
            elif cmd == "/log":
                print(render_log(api_log.entries, details=arg.strip() == "full"))
            elif cmd == "/clear":
                api_log.clear_logs()
                print("Log cleared.")
            else:
                print("Unknown command. Type /help.")

            if flow.step is Step.CONFIRM:
                print("Type /new to schedule another, or /quit.")
    finally:
        await api.aclose()


if __name__ == "__main__":
    asyncio.run(main())
