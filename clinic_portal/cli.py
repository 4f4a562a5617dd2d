#!/usr/bin/env python3
"""
Command-line front-end for the clinic booking backend.

Usage:
    clinic-portal register alice alice@example.com --full-name "Alice Doe"
    clinic-portal login alice
    clinic-portal book --doctor "Smith" --date 2026-11-02T09:30 --department Cardiology
    clinic-portal list
    clinic-portal cancel 42
    clinic-portal profile --phone "(555) 123-4567"
    clinic-portal logout

Environment Variables:
    API_BASE_URL: Backend API root (default: http://localhost:8080/api)
    STORAGE_BACKEND / STORAGE_PATH: Where the session is kept between runs
"""

import argparse
import asyncio
import getpass
import sys
from collections.abc import Awaitable, Callable

import httpx
import structlog

from clinic_portal.config import Settings, get_settings
from clinic_portal.core.exceptions import AppException, LoginRequiredException
from clinic_portal.core.logging import configure_logging
from clinic_portal.core.storage import get_store
from clinic_portal.core.validation import format_date
from clinic_portal.forms import appointments as appointment_forms
from clinic_portal.forms import auth as auth_forms
from clinic_portal.forms import profile as profile_forms
from clinic_portal.schemas.appointments import Appointment, AppointmentStatus, Department
from clinic_portal.schemas.users import User
from clinic_portal.services.api_client import ApiClient
from clinic_portal.services.appointment_service import AppointmentService
from clinic_portal.services.session import SessionManager
from clinic_portal.services.user_service import UserService

logger = structlog.get_logger(__name__)


class Portal:
    """Wires the services together for one command run."""

    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Build services from settings and restore the saved session."""
        self.store = get_store(settings)
        self.api = ApiClient.from_settings(settings, store=self.store, transport=transport)
        self.users = UserService(self.api)
        self.appointments = AppointmentService(self.api)
        self.session = SessionManager(self.users, self.store)
        self.session.initialize()

    async def aclose(self) -> None:
        await self.api.aclose()


def _password(value: str | None, prompt: str = "Password: ") -> str:
    return value if value is not None else getpass.getpass(prompt)


def _print_user(user: User) -> None:
    print(f"{user.username} (id {user.id})")
    print(f"  Name:    {user.full_name or 'N/A'}")
    print(f"  Email:   {user.email or 'N/A'}")
    print(f"  Phone:   {user.phone_number or 'N/A'}")
    print(f"  Address: {user.address or 'N/A'}")


def _print_appointment(appointment: Appointment) -> None:
    marker = " [cancellable]" if appointment.is_cancellable else ""
    print(f"#{appointment.id} {appointment.patient_name} - {appointment.status.value}{marker}")
    print(f"  Doctor:     Dr. {appointment.doctor_name}")
    print(f"  Department: {appointment.department or 'N/A'}")
    print(f"  Date:       {format_date(appointment.appointment_date)}")
    print(f"  Phone:      {appointment.patient_phone or 'N/A'}")
    if appointment.reason:
        print(f"  Reason:     {appointment.reason}")


async def cmd_register(portal: Portal, args: argparse.Namespace) -> None:
    form = auth_forms.RegisterForm(
        username=args.username,
        email=args.email,
        password=_password(args.password),
        full_name=args.full_name,
        phone_number=args.phone,
    )
    user = await auth_forms.register(portal.session, form)
    print(f"Registered and logged in as {user.username}")


async def cmd_login(portal: Portal, args: argparse.Namespace) -> None:
    form = auth_forms.LoginForm(username=args.username, password=_password(args.password))
    user = await auth_forms.login(portal.session, form)
    print(f"Logged in as {user.username}")


async def cmd_logout(portal: Portal, args: argparse.Namespace) -> None:
    portal.session.logout()
    print("Logged out")


async def cmd_whoami(portal: Portal, args: argparse.Namespace) -> None:
    user = portal.session.current_user
    if user is None:
        print("Not logged in")
        return
    _print_user(user)


async def cmd_book(portal: Portal, args: argparse.Namespace) -> None:
    form = appointment_forms.BookingForm(
        patient_name=args.patient_name,
        patient_phone=args.phone,
        appointment_date=args.date,
        doctor_name=args.doctor,
        department=args.department or "",
        reason=args.reason,
    )
    appointment = await appointment_forms.book(portal.session, portal.appointments, form)
    print("Your appointment has been booked successfully.")
    _print_appointment(appointment)


async def cmd_list(portal: Portal, args: argparse.Namespace) -> None:
    items = await appointment_forms.my_appointments(portal.session, portal.appointments)
    if args.status:
        items = [item for item in items if item.status == AppointmentStatus(args.status)]
    if not items:
        print("No appointments found")
        return
    for appointment in items:
        _print_appointment(appointment)


async def cmd_cancel(portal: Portal, args: argparse.Namespace) -> None:
    appointment = await appointment_forms.cancel(portal.appointments, args.appointment_id)
    print(f"Appointment #{appointment.id} cancelled successfully")


async def cmd_profile(portal: Portal, args: argparse.Namespace) -> None:
    user = portal.session.current_user
    if user is None:
        raise LoginRequiredException()

    form = profile_forms.ProfileForm.from_user(user)
    for field in ("full_name", "phone_number", "address", "email"):
        value = getattr(args, field)
        if value is not None:
            setattr(form, field, value)
    if args.change_password:
        form.current_password = getpass.getpass("Current password: ")
        form.new_password = getpass.getpass("New password: ")

    updated = await profile_forms.update_profile(portal.session, form)
    print("Profile updated successfully")
    _print_user(updated)


COMMANDS: dict[str, Callable[[Portal, argparse.Namespace], Awaitable[None]]] = {
    "register": cmd_register,
    "login": cmd_login,
    "logout": cmd_logout,
    "whoami": cmd_whoami,
    "book": cmd_book,
    "list": cmd_list,
    "cancel": cmd_cancel,
    "profile": cmd_profile,
}


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="clinic-portal",
        description="Book and manage clinic appointments",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    register = sub.add_parser("register", help="Create an account and log in")
    register.add_argument("username")
    register.add_argument("email")
    register.add_argument("--password", help="Prompted for when omitted")
    register.add_argument("--full-name", default="")
    register.add_argument("--phone", default="")

    login = sub.add_parser("login", help="Log in")
    login.add_argument("username")
    login.add_argument("--password", help="Prompted for when omitted")

    sub.add_parser("logout", help="Forget the saved session")
    sub.add_parser("whoami", help="Show the logged-in user")

    book = sub.add_parser("book", help="Book an appointment")
    book.add_argument("--doctor", required=True, help="Doctor name")
    book.add_argument("--date", required=True, help="Date and time, YYYY-MM-DDTHH:MM")
    book.add_argument("--department", choices=[d.value for d in Department])
    book.add_argument("--reason", default="")
    book.add_argument("--patient-name", help="Defaults to your profile name")
    book.add_argument("--phone", help="Defaults to your profile phone number")

    list_parser = sub.add_parser("list", help="List your appointments")
    list_parser.add_argument("--status", choices=[s.value for s in AppointmentStatus])

    cancel = sub.add_parser("cancel", help="Cancel an appointment")
    cancel.add_argument("appointment_id")

    profile = sub.add_parser("profile", help="Edit your profile")
    profile.add_argument("--full-name", dest="full_name")
    profile.add_argument("--phone", dest="phone_number")
    profile.add_argument("--address")
    profile.add_argument("--email")
    profile.add_argument("--change-password", action="store_true")

    return parser


async def run(
    args: argparse.Namespace,
    settings: Settings,
    transport: httpx.AsyncBaseTransport | None = None,
) -> int:
    """Run one command and return the exit status."""
    logger.debug(
        "command_started",
        app=settings.app_name,
        environment=settings.environment,
        command=args.command,
    )
    portal = Portal(settings, transport=transport)
    try:
        await COMMANDS[args.command](portal, args)
        return 0
    except AppException as e:
        logger.debug("command_failed", command=args.command, error=e.message)
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    finally:
        await portal.aclose()


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(settings)
    return asyncio.run(run(args, settings))


if __name__ == "__main__":
    sys.exit(main())
