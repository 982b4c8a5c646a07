from django.db import models
from backend.locations.models import Location

PLOT_STATUSES = ['Available', 'Booked', 'Blocked']


def normalize_plot_status(value):
    """Map a plot status onto its canonical spelling, case-insensitively"""
    if value is None:
        return None
    lookup = {s.lower(): s for s in PLOT_STATUSES}
    return lookup.get(str(value).strip().lower())


def summarize_plots(plots):
    """Count plots per status; unknown statuses only count towards the total"""
    summary = {'total': 0, 'available': 0, 'booked': 0, 'blocked': 0}
    for plot in plots or []:
        summary['total'] += 1
        status = normalize_plot_status(plot.get('status') if isinstance(plot, dict) else None)
        if status:
            summary[status.lower()] += 1
    return summary


class ProjectCategory(models.Model):
    """Project categories (residential plots, villas, ...)"""
    name = models.CharField(max_length=100)
    slug = models.SlugField(max_length=100, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            from backend.core.utils import unique_slug
            self.slug = unique_slug(ProjectCategory, self.name, instance_pk=self.pk, max_length=100)
        super().save(*args, **kwargs)

    class Meta:
        db_table = 'project_categories'
        verbose_name_plural = 'project categories'
        ordering = ['name']


class Project(models.Model):
    """Real-estate development listing"""
    STATUS_CHOICES = [
        ('Active', 'Active'),
        ('Inactive', 'Inactive'),
    ]

    name = models.CharField(max_length=255, db_index=True)
    slug = models.SlugField(max_length=255, unique=True)
    category = models.ForeignKey(ProjectCategory, on_delete=models.PROTECT, related_name='projects')
    location = models.ForeignKey(Location, on_delete=models.PROTECT, related_name='projects')
    description = models.TextField(blank=True)
    price = models.CharField(max_length=100, blank=True)
    offer_price = models.CharField(max_length=100, blank=True)
    total_plots = models.PositiveIntegerField(default=0)
    plots = models.JSONField(default=list, blank=True)
    images = models.JSONField(default=list, blank=True)
    featured_image = models.CharField(max_length=500, blank=True)
    video_url = models.CharField(max_length=500, blank=True)
    brochure_pdf = models.CharField(max_length=500, blank=True)
    map_embed_url = models.TextField(blank=True)
    rera_number = models.CharField(max_length=100, blank=True)
    amenities = models.JSONField(default=list, blank=True)
    location_advantages = models.JSONField(default=list, blank=True)
    why_invest = models.JSONField(default=list, blank=True)
    seo = models.JSONField(default=dict, blank=True)
    schema = models.JSONField(default=dict, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='Active', db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            from backend.core.utils import unique_slug
            self.slug = unique_slug(Project, self.name, instance_pk=self.pk)
        super().save(*args, **kwargs)

    @property
    def plot_summary(self):
        return summarize_plots(self.plots)

    def find_plot(self, plot_number):
        for plot in self.plots or []:
            if str(plot.get('plotNumber')) == str(plot_number):
                return plot
        return None

    class Meta:
        db_table = 'projects'
        ordering = ['-created_at']
