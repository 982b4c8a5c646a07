"""
Test utilities and factories for creating test data
"""
from datetime import timedelta
from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from backend.core.models import Role, normalize_permissions
from backend.locations.models import Location
from backend.projects.models import Project, ProjectCategory
from backend.blog.models import BlogCategory, BlogPost
from backend.cms.models import Page, Testimonial, Gallery
from backend.leads.models import Lead, LeadNote, SiteVisit
from backend.reports.models import AnalyticsEvent
import random
import string

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_role(name=None, permissions=None, is_system=False):
        """Create a role; ``permissions`` takes a module list or a full map"""
        if not name:
            name = f'Role_{TestDataFactory.random_string(6)}'
        return Role.objects.create(
            name=name,
            permissions=normalize_permissions(permissions or []),
            is_system=is_system
        )

    @staticmethod
    def create_user(username=None, email=None, password='testpass123', is_staff=False,
                    is_superuser=False, role=None, modules=None):
        """
        Create a test user. ``modules`` is a shortcut that gives the user a
        fresh role with full access to the listed modules.
        """
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        if modules is not None and role is None:
            role = TestDataFactory.create_role(permissions=modules)
        return User.objects.create_user(
            username=username,
            email=email,
            password=password,
            is_staff=is_staff,
            is_superuser=is_superuser,
            role=role
        )

    @staticmethod
    def create_admin(username=None):
        """Create a superuser with access to every module"""
        return TestDataFactory.create_user(username=username, is_staff=True, is_superuser=True)

    @staticmethod
    def create_location(name=None, is_active=True):
        if not name:
            name = f'Location {TestDataFactory.random_string(6)}'
        return Location.objects.create(name=name, is_active=is_active)

    @staticmethod
    def create_category(name=None):
        """Create a project category"""
        if not name:
            name = f'Category {TestDataFactory.random_string(6)}'
        return ProjectCategory.objects.create(name=name)

    @staticmethod
    def create_project(name=None, category=None, location=None, status='Active', plots=None, **extra):
        """Create a test project"""
        if not name:
            name = f'Project {TestDataFactory.random_string(6)}'
        if not category:
            category = TestDataFactory.create_category()
        if not location:
            location = TestDataFactory.create_location()
        if plots is None:
            plots = [
                {'plotNumber': '1', 'dimensions': '30x40', 'facing': 'East', 'status': 'Available'},
                {'plotNumber': '2', 'dimensions': '30x40', 'facing': 'West', 'status': 'Booked'},
                {'plotNumber': '3', 'dimensions': '40x60', 'facing': 'North', 'status': 'Blocked'},
            ]
        return Project.objects.create(
            name=name,
            category=category,
            location=location,
            status=status,
            plots=plots,
            total_plots=len(plots),
            price='25 Lakhs',
            **extra
        )

    @staticmethod
    def create_blog_category(name=None):
        if not name:
            name = f'Blog Category {TestDataFactory.random_string(6)}'
        return BlogCategory.objects.create(name=name)

    @staticmethod
    def create_blog_post(title=None, status='Published', publish_date=None, category=None, author='Admin'):
        """Create a test blog post, published an hour ago by default"""
        if not title:
            title = f'Post {TestDataFactory.random_string(6)}'
        if publish_date is None:
            publish_date = timezone.now() - timedelta(hours=1)
        return BlogPost.objects.create(
            title=title,
            status=status,
            publish_date=publish_date,
            category=category,
            content=f'<p>Content of {title}</p>',
            author=author
        )

    @staticmethod
    def create_page(title=None, status='Published'):
        if not title:
            title = f'Page {TestDataFactory.random_string(6)}'
        return Page.objects.create(title=title, status=status, content=f'<p>{title}</p>')

    @staticmethod
    def create_testimonial(name=None, status='Active', featured=False, project=None, rating=5):
        if not name:
            name = f'Customer {TestDataFactory.random_string(6)}'
        return Testimonial.objects.create(
            name=name,
            testimonial='Great experience buying our plot.',
            status=status,
            featured=featured,
            project=project,
            rating=rating
        )

    @staticmethod
    def create_gallery(title=None, project=None, is_active=True):
        if not title:
            title = f'Gallery {TestDataFactory.random_string(6)}'
        return Gallery.objects.create(
            title=title,
            images=['https://example.com/1.jpg', 'https://example.com/2.jpg'],
            project=project,
            is_active=is_active
        )

    @staticmethod
    def create_lead(name=None, phone=None, email=None, project=None, status='New', source='Website',
                    project_interest=''):
        """Create a test lead"""
        if not name:
            name = f'Lead {TestDataFactory.random_string(6)}'
        if phone is None:
            phone = f'9{random.randint(100000000, 999999999)}'
        if email is None:
            email = f'{TestDataFactory.random_string(8).lower()}@test.com'
        return Lead.objects.create(
            name=name,
            phone=phone,
            email=email,
            project=project,
            project_interest=project_interest or (project.name if project else ''),
            status=status,
            source=source
        )

    @staticmethod
    def create_lead_note(lead, text='Called the customer', user=None):
        return LeadNote.objects.create(lead=lead, text=text, created_by=user)

    @staticmethod
    def create_site_visit(project=None, lead=None, visit_date=None, visit_time='10:30', status='Scheduled'):
        """Create a test site visit, tomorrow by default"""
        if not project:
            project = lead.project if lead and lead.project else TestDataFactory.create_project()
        if visit_date is None:
            visit_date = timezone.localdate() + timedelta(days=1)
        return SiteVisit.objects.create(
            lead=lead,
            customer_name=lead.name if lead else f'Visitor {TestDataFactory.random_string(4)}',
            customer_phone=lead.phone if lead else '9876543210',
            customer_email=lead.email if lead else '',
            project=project,
            visit_date=visit_date,
            visit_time=visit_time,
            status=status
        )

    @staticmethod
    def create_event(event_type='page_view', project=None, path='/'):
        return AnalyticsEvent.objects.create(event_type=event_type, project=project, path=path)


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
