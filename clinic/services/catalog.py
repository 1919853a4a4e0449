from clinic.models import Service


def format_service(s: Service) -> dict:
    return {
        'id': s.id,
        'name': s.name,
        'price': float(s.price),
        'status': s.status,
    }

