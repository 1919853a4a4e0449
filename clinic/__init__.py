"""Clinic application for the Olympus backend.

This package contains models, serializers, views and route registrations
for accounts, appointments, doctors, schedules, services and medical
records.
"""
