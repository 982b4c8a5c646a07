from django.core.management.base import BaseCommand
from backend.core.models import Role, SUPER_ADMIN_ROLE, normalize_permissions


class Command(BaseCommand):
    help = 'Create the default dashboard roles: Super Admin, Admin and Staff'

    def add_arguments(self, parser):
        parser.add_argument(
            '--reset',
            action='store_true',
            help='Overwrite the permissions of roles that already exist',
        )

    def handle(self, *args, **options):
        roles_config = [
            {
                'name': SUPER_ADMIN_ROLE,
                'description': 'Full access to every module',
                'permissions': ['all'],
            },
            {
                'name': 'Admin',
                'description': 'Site content, projects and leads',
                'permissions': ['dashboard', 'seo', 'cms', 'settings', 'projects', 'blog', 'pages', 'leads'],
            },
            {
                'name': 'Staff',
                'description': 'Lead handling and blog writing',
                'permissions': ['dashboard', 'leads', 'blog'],
            },
        ]

        created_count = 0
        updated_count = 0

        for role_config in roles_config:
            permissions = normalize_permissions(role_config['permissions'])
            role, created = Role.objects.get_or_create(
                name=role_config['name'],
                defaults={
                    'description': role_config['description'],
                    'permissions': permissions,
                    'is_system': True,
                }
            )

            if created:
                self.stdout.write(self.style.SUCCESS(f'✓ Created role: {role.name}'))
                created_count += 1
                continue

            updated_count += 1
            if options['reset']:
                role.permissions = permissions
                role.description = role_config['description']
                role.is_system = True
                role.save()
                self.stdout.write(f'  Reset permissions for role: {role.name}')
            else:
                self.stdout.write(f'  Role already exists: {role.name}')

        self.stdout.write(self.style.SUCCESS(
            f'\nCompleted: {created_count} roles created, {updated_count} roles already existed'
        ))
