import logging

from django.core.management.base import BaseCommand
from django.db import transaction

from catalog.domain.models import Category, Gender


logger = logging.getLogger(__name__)

# (slug, name, description); slugs repeat across genders
CATEGORIES = {
    Gender.MENS: [
        ("t-shirts", "T-Shirts", "Casual and comfortable tees"),
        ("polo-shirts", "Polo Shirts", "Classic polo shirts for smart casual look"),
        ("shirts", "Shirts (Formal, Casual)", "Classic and contemporary shirt styles"),
        ("hoodies", "Hoodies & Sweatshirts", "Comfortable hoodies and sweatshirts"),
        ("jackets", "Jackets & Coats", "Premium jackets and coats for every season"),
        ("sweaters", "Sweaters & Cardigans", "Warm and stylish knitwear"),
        ("jeans", "Jeans", "Premium denim jeans collection"),
        ("trousers", "Trousers", "Formal and casual trousers"),
        ("shorts", "Shorts", "Comfortable shorts for casual wear"),
        ("cargo-pants", "Cargo Pants", "Utility cargo pants"),
        ("undergarments", "Undergarments", "Everyday essentials"),
    ],
    Gender.WOMENS: [
        ("hoodies", "Hoodies & Sweatshirts", "Cozy hoodies and sweatshirts"),
        ("sweaters", "Sweaters & Cardigans", "Elegant knitwear"),
        ("tops", "Tops", "Blouses, tanks and crop tops"),
        ("tunics", "Tunics & Kurtis", "Casual and ethnic tunics"),
        ("shorts", "Shorts", "Casual and athletic shorts"),
        ("bras", "Bras", "Everyday and sports bras"),
        ("panties", "Panties", "Comfortable everyday underwear"),
    ],
    Gender.KIDS: [
        ("t-shirts", "T-Shirts", "Fun and comfortable tees for kids"),
        ("hoodies", "Hoodies", "Cozy kids hoodies"),
        ("jeans", "Jeans", "Durable jeans for kids"),
        ("shorts", "Shorts", "Play-ready shorts"),
        ("dresses", "Dresses", "Dresses for every occasion"),
        ("jackets", "Jackets", "Warm kids outerwear"),
        ("accessories", "Accessories", "Caps, bags and more"),
    ],
}


class Command(BaseCommand):
    help = "Seeds the gender-scoped clothing categories into the database."

    def add_arguments(self, parser):
        parser.add_argument(
            "--gender",
            choices=[gender.value for gender in CATEGORIES],
            help="Only seed categories for this gender",
        )

    def handle(self, *args, **options):
        only = options.get("gender")

        self.stdout.write(self.style.SUCCESS("Seeding categories..."))

        created_count = 0
        with transaction.atomic():
            for gender, entries in CATEGORIES.items():
                if only and gender != only:
                    continue
                for slug, name, description in entries:
                    category, created = Category.objects.get_or_create(
                        slug=slug,
                        gender=gender,
                        defaults={"name": name, "description": description},
                    )
                    if created:
                        self.stdout.write(self.style.SUCCESS(f"Created category: {gender}/{category.slug}"))
                        created_count += 1
                    else:
                        self.stdout.write(self.style.WARNING(f"Category already exists: {gender}/{category.slug}"))

        logger.info(f"Seeded {created_count} categories")
        self.stdout.write(self.style.SUCCESS(f"Category seeding complete. Created {created_count} categories."))
