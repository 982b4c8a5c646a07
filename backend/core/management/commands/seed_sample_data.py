"""
Management command to seed a fresh site with default settings documents,
lookup data and a sample project
"""
from django.core.management.base import BaseCommand
from django.db import transaction
from backend.core.models import Setting
from backend.core.cache_signals import suspend_cache_signals
from backend.core.cache_utils import invalidate_public_projects_cache, invalidate_dashboard_cache
from backend.locations.models import Location
from backend.projects.models import Project, ProjectCategory

CATEGORIES = [
    'Residential Plots',
    'Commercial Plots',
    'Agricultural Land',
    'Luxury Villas',
]

LOCATIONS = [
    'Hyderabad',
    'Bangalore',
    'Chennai',
]

DEFAULT_SETTINGS = {
    'settings': {
        'website': {
            'name': 'Estate Developers',
            'slogan': 'Building Dreams, Creating Homes',
            'headerLogo': '',
            'footerLogo': '',
        },
        'contact': {
            'phone': '+91 1234567890',
            'email': 'info@example.com',
            'address': '123 Main Street, City, State - 500001',
        },
        'mail': {
            'host': 'smtp.example.com',
            'port': '587',
            'username': '',
            'password': '',
            'fromEmail': 'info@example.com',
            'fromName': 'Estate Developers',
        },
        'theme': {
            'primaryColor': '#2563eb',
            'secondaryColor': '#1e40af',
            'accentColor': '#3b82f6',
            'textColor': '#1f2937',
        },
        'footer': {
            'text': 'A real estate company dedicated to building quality homes and thriving communities.',
            'copyright': '© Estate Developers. All rights reserved.',
        },
        'social': {
            'facebook': '',
            'twitter': '',
            'instagram': '',
            'linkedin': '',
        },
    },
    'seoSettings': {
        'general': {
            'siteTitle': 'Estate Developers - Premium Real Estate',
            'metaDescription': 'Premium plots and properties in fast growing locations',
            'keywords': 'real estate, plots, properties, land, investment',
        },
        'analytics': {
            'googleAnalyticsId': '',
            'googleTagManagerId': '',
            'facebookPixelId': '',
            'enableTracking': True,
        },
        'robots': {
            'content': 'User-agent: *\nAllow: /',
        },
        'sitemap': {
            'enabled': True,
            'frequency': 'weekly',
            'priority': 0.8,
        },
        'indexing': {
            'allowIndexing': True,
            'noFollow': False,
            'maxSnippet': 160,
        },
    },
    'menus': {
        'header': [
            {'label': 'Home', 'url': '/'},
            {'label': 'Projects', 'url': '/projects'},
            {'label': 'Blog', 'url': '/blog'},
            {'label': 'About', 'url': '/about'},
            {'label': 'Contact', 'url': '/contact'},
        ],
        'footer': [
            {'label': 'Privacy Policy', 'url': '/privacy-policy'},
            {'label': 'Terms', 'url': '/terms'},
            {'label': 'Track Enquiry', 'url': '/track'},
        ],
    },
    'cmsPages': {
        'home': {
            'bannerType': 'slider',
            'bannerImages': [],
            'title': 'Building Dreams, Creating Landmarks',
            'subtitle': 'Premium Real Estate Development with Unmatched Quality',
            'features': [
                {'title': 'Prime Locations', 'description': 'Well connected properties in developing areas'},
                {'title': 'Trusted Developer', 'description': 'Years of delivering projects to happy families'},
                {'title': 'Affordable Pricing', 'description': 'Transparent pricing with flexible payment options'},
            ],
        },
        'about': {
            'title': 'About Us',
            'content': '',
            'vision': 'To be the most trusted and preferred real estate developer',
            'mission': 'To create sustainable communities and deliver value to our customers',
        },
        'contact': {
            'title': 'Contact Us',
            'mapEmbedUrl': '',
        },
    },
}

SAMPLE_PROJECT = {
    'name': 'Green Valley Plots',
    'description': 'Gated community of residential plots with wide roads and landscaped parks.',
    'price': '₹25 Lakhs onwards',
    'offer_price': '₹22 Lakhs onwards',
    'rera_number': 'P02400001234',
    'amenities': ['Gated Community', '24x7 Security', 'Children Play Area', 'Underground Drainage'],
    'location_advantages': [
        {'place': 'Outer Ring Road', 'distance': '5 km'},
        {'place': 'International Airport', 'distance': '25 km'},
    ],
    'why_invest': ['Rapidly developing corridor', 'Clear title and approvals'],
    'plots': [
        {'plotNumber': '1', 'dimensions': '30x40', 'facing': 'East', 'status': 'Available'},
        {'plotNumber': '2', 'dimensions': '30x40', 'facing': 'West', 'status': 'Booked'},
        {'plotNumber': '3', 'dimensions': '40x60', 'facing': 'North', 'status': 'Available'},
        {'plotNumber': '4', 'dimensions': '40x60', 'facing': 'South', 'status': 'Blocked'},
    ],
}


class Command(BaseCommand):
    help = "Seeds default settings documents, categories, locations and a sample project"

    def add_arguments(self, parser):
        parser.add_argument(
            '--overwrite-settings',
            action='store_true',
            help='Replace settings documents that already exist',
        )
        parser.add_argument(
            '--skip-project',
            action='store_true',
            help='Do not create the sample project',
        )

    def handle(self, *args, **options):
        self.stdout.write(self.style.SUCCESS("=" * 80))
        self.stdout.write(self.style.SUCCESS("SEEDING SAMPLE DATA"))
        self.stdout.write(self.style.SUCCESS("=" * 80))

        with suspend_cache_signals(), transaction.atomic():
            for key, value in DEFAULT_SETTINGS.items():
                if options['overwrite_settings']:
                    Setting.objects.update_or_create(key=key, defaults={'value': value})
                    self.stdout.write(f"  Wrote settings document: {key}")
                else:
                    _, created = Setting.objects.get_or_create(key=key, defaults={'value': value})
                    self.stdout.write(f"  {'Created' if created else 'Kept existing'} settings document: {key}")

            categories = {}
            for name in CATEGORIES:
                categories[name], created = ProjectCategory.objects.get_or_create(name=name)
                if created:
                    self.stdout.write(self.style.SUCCESS(f"✓ Created category: {name}"))

            locations = {}
            for name in LOCATIONS:
                locations[name], created = Location.objects.get_or_create(name=name)
                if created:
                    self.stdout.write(self.style.SUCCESS(f"✓ Created location: {name}"))

            if not options['skip_project'] and not Project.objects.filter(name=SAMPLE_PROJECT['name']).exists():
                project = Project.objects.create(
                    category=categories['Residential Plots'],
                    location=locations['Hyderabad'],
                    total_plots=len(SAMPLE_PROJECT['plots']),
                    **SAMPLE_PROJECT
                )
                self.stdout.write(self.style.SUCCESS(f"✓ Created sample project: {project.name}"))

        invalidate_public_projects_cache()
        invalidate_dashboard_cache()
        self.stdout.write(self.style.SUCCESS("\nSample data ready."))
