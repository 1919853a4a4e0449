"""
Management command to populate the database with development data.
"""
import random
from datetime import timedelta
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from clinic.models import Appointment, Doctor, Service, User
from clinic.services.periods import parse_wall_clock, shift
from clinic.services.schedules import has_conflict

SERVICES = [
    ('General Consultation', '500.00'),
    ('Dental Cleaning', '1200.00'),
    ('Laboratory', '800.00'),
    ('X-Ray', '1500.00'),
    ('Pediatrics', '650.00'),
    ('Vaccination', '350.00'),
]

DOCTORS = [
    ('Dr. Maria Santos', 'General Medicine'),
    ('Dr. Jose Reyes', 'Dentistry'),
    ('Dr. Ana Cruz', 'Pediatrics'),
    ('Dr. Paolo Lim', 'Radiology'),
]

PATIENT_PASSWORD = 'Olympus#Clinic42'


class Command(BaseCommand):
    help = 'Populate database with services, doctors, schedules, patients and appointments'

    def add_arguments(self, parser):
        parser.add_argument('--patients', type=int, default=8)
        parser.add_argument('--days', type=int, default=14, help='days of schedules/appointments around today')
        parser.add_argument('--seed', type=int, default=7)

    @transaction.atomic
    def handle(self, *args, **options):
        random.seed(options['seed'])
        services = self.create_services()
        doctors = self.create_doctors()
        self.create_schedules(doctors, options['days'])
        patients = self.create_patients(options['patients'])
        self.create_appointments(patients, services, options['days'])
        self.stdout.write(self.style.SUCCESS('Seed data ready.'))

    def create_services(self):
        services = []
        for name, price in SERVICES:
            service, _ = Service.objects.get_or_create(name=name, defaults={'price': Decimal(price)})
            services.append(service)
        self.stdout.write(f'services: {len(services)}')
        return services

    def create_doctors(self):
        now = timezone.now()
        doctors = []
        for name, specialization in DOCTORS:
            doctor, _ = Doctor.objects.get_or_create(
                name=name, defaults={'specialization': specialization, 'schedule': now}
            )
            doctors.append(doctor)
        self.stdout.write(f'doctors: {len(doctors)}')
        return doctors

    def create_schedules(self, doctors, days):
        today = shift(timezone.now()).date()
        created = 0
        for offset in range(-days, days + 1):
            day = (today + timedelta(days=offset)).isoformat()
            for i, doctor in enumerate(doctors):
                # morning or afternoon block, alternating per doctor
                start = parse_wall_clock(day, '08:00' if i % 2 == 0 else '13:00')
                end = start + timedelta(hours=4)
                if has_conflict(doctor.id, start, end):
                    continue
                doctor.schedules.create(start=start, end=end)
                created += 1
        self.stdout.write(f'schedules: {created}')

    def create_patients(self, count):
        patients = []
        for n in range(1, count + 1):
            email = f'patient{n}@example.com'
            user, created = User.objects.get_or_create(
                email=email,
                defaults={
                    'username': email,
                    'first_name': f'Patient{n}',
                    'last_name': random.choice(['Garcia', 'Mendoza', 'Torres', 'Flores', 'Ramos']),
                    'role': User.ROLE_PATIENT,
                    'gender': random.choice(['Male', 'Female']),
                    'marital_status': random.choice(['Single', 'Married']),
                    'address': f'{n} Rizal Street',
                    'phone_number': f'0917{random.randint(1000000, 9999999)}',
                },
            )
            if created:
                user.set_password(PATIENT_PASSWORD)
                user.save(update_fields=['password'])
            patients.append(user)
        self.stdout.write(f'patients: {len(patients)} (password {PATIENT_PASSWORD})')
        return patients

    def create_appointments(self, patients, services, days):
        today = shift(timezone.now()).date()
        names = [s.name for s in services]
        created = 0
        for patient in patients:
            for _ in range(3):
                offset = random.randint(-days, days)
                day = (today + timedelta(days=offset)).isoformat()
                schedule = parse_wall_clock(day, random.choice(['09:00', '10:30', '14:00', '15:30']))
                if offset < 0:
                    status = random.choice([
                        Appointment.STATUS_COMPLETED,
                        Appointment.STATUS_COMPLETED,
                        Appointment.STATUS_NO_SHOW,
                        Appointment.STATUS_CANCELLED,
                    ])
                else:
                    status = random.choice([Appointment.STATUS_PENDING, Appointment.STATUS_APPROVED])
                Appointment.objects.create(
                    patient=patient,
                    medical_department=random.sample(names, random.randint(1, 3)),
                    email=patient.email,
                    phone_number=patient.phone_number,
                    schedule=schedule,
                    status=status,
                )
                created += 1
        self.stdout.write(f'appointments: {created}')
