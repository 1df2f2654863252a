from django.core.management.base import BaseCommand
from django.db import models

from production_line.models import Roll, generate_roll_identification


class Command(BaseCommand):
    help = "Assign QR identifications to rolls that do not yet have one."

    def handle(self, *args, **options):
        updated = 0
        taken = set(Roll.objects.exclude(roll_identification='').values_list('roll_identification', flat=True))
        for roll in Roll.objects.filter(models.Q(roll_identification__isnull=True) | models.Q(roll_identification='')):
            code = generate_roll_identification()
            while code in taken:
                code = generate_roll_identification()
            taken.add(code)
            roll.roll_identification = code
            roll.save(update_fields=["roll_identification"])
            updated += 1
        if updated:
            self.stdout.write(self.style.SUCCESS(f"Assigned identifications to {updated} rolls."))
        else:
            self.stdout.write("No rolls required identification assignment.")
