"""
URL configuration for the schooldesk project.

Each app mounts its JSON endpoints and exports under its own prefix.
"""
from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    # Django admin (also provides the login page)
    path('admin/', admin.site.urls),

    # Core app - dashboard
    path('', include(('core.urls', 'core'), namespace='core')),

    # Students app
    path('students/', include(('students.urls', 'students'), namespace='students')),

    # Academics app - leaderboards, report cards, score entry
    path('academics/', include(('academics.urls', 'academics'), namespace='academics')),

    # Fees app - structures, payments, balances
    path('fees/', include(('fees.urls', 'fees'), namespace='fees')),

    # Attendance app
    path('attendance/', include(('attendance.urls', 'attendance'), namespace='attendance')),
]
