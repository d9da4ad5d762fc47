import logging
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from inventory.models import Supplier, InventoryLocation, InventoryItem, InventorySettings

logger = logging.getLogger(__name__)

SUPPLIERS = [
    ("MEDLINE", "Medline Industries", "Net 30"),
    ("CARDINAL", "Cardinal Health", "Net 45"),
]

LOCATIONS = [
    ("CW", "Central Warehouse", InventoryLocation.LocationType.WAREHOUSE),
    ("PHARM", "Main Pharmacy", InventoryLocation.LocationType.PHARMACY),
    ("OR1", "Operating Room 1", InventoryLocation.LocationType.OPERATING_ROOM),
]

ITEMS = [
    ("GLV-NIT-M", "Nitrile exam gloves, medium", InventoryItem.Category.MEDICAL_SUPPLIES, "BX", "8.50", False),
    ("SYR-10ML", "Syringe 10 ml, luer lock", InventoryItem.Category.MEDICAL_SUPPLIES, "EA", "0.35", False),
    ("AMOX-500", "Amoxicillin 500 mg capsules", InventoryItem.Category.PHARMACEUTICALS, "BT", "12.00", True),
    ("SUT-3-0", "Suture 3-0 absorbable", InventoryItem.Category.SURGICAL_SUPPLIES, "BX", "45.00", True),
]


class Command(BaseCommand):
    help = 'Create demo suppliers, locations and inventory items'

    def add_arguments(self, parser):
        parser.add_argument('--costing-method', choices=InventorySettings.CostingMethod.values,
                            help='Also set the costing method')

    @transaction.atomic
    def handle(self, *args, **options):
        created = 0

        for code, name, terms in SUPPLIERS:
            _, was_created = Supplier.objects.get_or_create(
                code=code, defaults={'name': name, 'payment_terms': terms}
            )
            created += was_created

        for code, name, location_type in LOCATIONS:
            _, was_created = InventoryLocation.objects.get_or_create(
                code=code, defaults={'name': name, 'location_type': location_type}
            )
            created += was_created

        for sku, name, category, uom, cost, expirable in ITEMS:
            _, was_created = InventoryItem.objects.get_or_create(
                sku=sku,
                defaults={
                    'name': name,
                    'category': category,
                    'unit_of_measure': uom,
                    'unit_cost': Decimal(cost),
                    'average_cost': Decimal(cost),
                    'last_cost': Decimal(cost),
                    'is_lot_tracked': expirable,
                    'is_expirable': expirable,
                },
            )
            created += was_created

        settings = InventorySettings.load()
        if settings.default_receiving_location_id is None:
            settings.default_receiving_location = InventoryLocation.objects.get(code='CW')
        if options.get('costing_method'):
            settings.costing_method = options['costing_method']
        settings.save()

        logger.info("Seeded %s inventory records", created)
        self.stdout.write(self.style.SUCCESS(f'Created {created} records.'))
