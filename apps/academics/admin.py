# academics/admin.py

from django.contrib import admin
from .models import AcademicYear, SchoolClass, Subject, ReportCard


@admin.register(AcademicYear)
class AcademicYearAdmin(admin.ModelAdmin):
    list_display = ['name', 'is_active', 'created_at']
    list_filter = ['is_active']
    actions = ['make_active']

    @admin.action(description="Set as the active academic year")
    def make_active(self, request, queryset):
        if queryset.count() != 1:
            self.message_user(request, "Select exactly one academic year.", level='error')
            return
        queryset.first().set_active()


@admin.register(SchoolClass)
class SchoolClassAdmin(admin.ModelAdmin):
    list_display = ['name', 'level', 'teacher_name', 'capacity']
    list_filter = ['level']
    search_fields = ['name', 'teacher_name']


@admin.register(Subject)
class SubjectAdmin(admin.ModelAdmin):
    list_display = ['name', 'code', 'school_class', 'is_active']
    list_filter = ['is_active', 'school_class']
    search_fields = ['name', 'code']


@admin.register(ReportCard)
class ReportCardAdmin(admin.ModelAdmin):
    list_display = ['student', 'subject', 'term', 'academic_year', 'score']
    list_filter = ['term', 'academic_year', 'subject__school_class']
    search_fields = ['student__full_name', 'student__admission_number', 'subject__name']
    raw_id_fields = ['student']
