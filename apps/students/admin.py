# students/admin.py

from django.contrib import admin
from .models import Student


@admin.register(Student)
class StudentAdmin(admin.ModelAdmin):
    list_display = ['admission_number', 'full_name', 'school_class', 'gender', 'status']
    list_filter = ['status', 'gender', 'school_class']
    search_fields = ['full_name', 'admission_number', 'parent_name', 'parent_phone']
    readonly_fields = ['id', 'created_at', 'updated_at', 'created_by_id', 'updated_by_id']
