from django.db import models


class Location(models.Model):
    """Cities and localities that projects are listed under"""
    name = models.CharField(max_length=100)
    slug = models.SlugField(max_length=100, unique=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            from backend.core.utils import unique_slug
            self.slug = unique_slug(Location, self.name, instance_pk=self.pk, max_length=100)
        super().save(*args, **kwargs)

    class Meta:
        db_table = 'locations'
        ordering = ['name']
