from django.core.management.base import BaseCommand, CommandError

from clinic.models import User


class Command(BaseCommand):
    help = "Ensure an admin account exists with the given e-mail and password (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument('--email', required=True)
        parser.add_argument('--password', required=True)
        parser.add_argument('--firstname', default='Clinic')
        parser.add_argument('--surname', default='Admin')
        parser.add_argument('--superuser', action='store_true', help='also grant Django admin access')

    def handle(self, *args, **opts):
        email = opts['email'].strip().lower()
        if not email:
            raise CommandError('--email must not be empty')
        u, created = User.objects.get_or_create(
            email=email,
            defaults={
                'username': email,
                'first_name': opts['firstname'],
                'last_name': opts['surname'],
                'role': User.ROLE_ADMIN,
            },
        )
        # correct role, password and active flag on existing accounts too
        u.role = User.ROLE_ADMIN
        u.is_active = True
        if opts['superuser']:
            u.is_staff = True
            u.is_superuser = True
        u.set_password(opts['password'])
        u.save()
        verb = 'created' if created else 'updated'
        self.stdout.write(self.style.SUCCESS(f"{verb}: {email} (admin)"))
