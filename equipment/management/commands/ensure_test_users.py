from django.core.management.base import BaseCommand
from django.contrib.auth.hashers import make_password
from equipment.models import User

TEST_SET = [
    ("admin@diacare.com", "admin", "lamya", {"admin_id": "A001"}),
    ("tech@diacare.com", "technician", "mehdi", {"technician_id": "T001"}),
    ("patient@diacare.com", "patient", "douha", {"patient_id": "P001"}),
]


class Command(BaseCommand):
    help = "Ensure the demo accounts exist with password=password123 (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--password", default="password123")

    def handle(self, *args, **opts):
        password = make_password(opts["password"])
        for email, role, name, codes in TEST_SET:
            u, created = User.objects.get_or_create(
                username=email,
                defaults={"email": email, "role": role, "first_name": name,
                          "password": password, "is_active": True, **codes},
            )
            if not created:
                u.password = password
                u.role = role
                u.is_active = True
                for attr, value in codes.items():
                    setattr(u, attr, value)
                u.save(update_fields=["password", "role", "is_active", *codes])
            self.stdout.write(self.style.SUCCESS(f"ok: {email} ({role})"))
        self.stdout.write(self.style.SUCCESS("All test users ensured."))
