# registry/management/commands/create_hospital.py
from django.core.management.base import BaseCommand, CommandError

from registry.exceptions import DirectoryError
from registry.services.directory import Directory


class Command(BaseCommand):
    help = "Create a hospital and its staff role secrets (bootstrap for the first Admin)."

    def add_arguments(self, parser):
        parser.add_argument("name")
        parser.add_argument("--admin-password", required=True)
        parser.add_argument("--doctor-password", required=True)
        parser.add_argument("--receptionist-password", required=True)
        parser.add_argument("--coordinates", nargs=2, type=float, required=True, metavar=("LAT", "LNG"))
        parser.add_argument("--services", nargs="+", required=True)

    def handle(self, *args, **opts):
        data = {
            "name": opts["name"],
            "adminPassword": opts["admin_password"],
            "doctorPassword": opts["doctor_password"],
            "receptionistPassword": opts["receptionist_password"],
            "coordinates": opts["coordinates"],
            "services": opts["services"],
        }
        try:
            hospital = Directory.from_settings().add_hospital(data)
        except DirectoryError as exc:
            fields = f" {exc.fields}" if exc.fields else ""
            raise CommandError(f"{exc.detail}{fields}") from exc
        self.stdout.write(self.style.SUCCESS(f"ok: {hospital.name} (id={hospital.pk})"))
