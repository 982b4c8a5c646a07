from django.db import models
from django.utils import timezone


class BlogCategory(models.Model):
    name = models.CharField(max_length=100)
    slug = models.SlugField(max_length=100, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            from backend.core.utils import unique_slug
            self.slug = unique_slug(BlogCategory, self.name, instance_pk=self.pk, max_length=100)
        super().save(*args, **kwargs)

    class Meta:
        db_table = 'blog_categories'
        verbose_name_plural = 'blog categories'
        ordering = ['name']


class BlogPost(models.Model):
    STATUS_CHOICES = [
        ('Draft', 'Draft'),
        ('Published', 'Published'),
    ]

    title = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, unique=True)
    category = models.ForeignKey(BlogCategory, on_delete=models.SET_NULL, null=True, blank=True, related_name='posts')
    content = models.TextField(blank=True)
    excerpt = models.TextField(blank=True)
    featured_image = models.CharField(max_length=500, blank=True)
    meta_description = models.CharField(max_length=500, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='Draft', db_index=True)
    publish_date = models.DateTimeField(default=timezone.now, db_index=True)
    author = models.CharField(max_length=150, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.title

    def save(self, *args, **kwargs):
        if not self.slug:
            from backend.core.utils import unique_slug
            self.slug = unique_slug(BlogPost, self.title, instance_pk=self.pk)
        super().save(*args, **kwargs)

    @property
    def is_live(self):
        return self.status == 'Published' and self.publish_date <= timezone.now()

    class Meta:
        db_table = 'blog_posts'
        ordering = ['-publish_date', '-created_at']
