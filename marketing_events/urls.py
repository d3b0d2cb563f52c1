from django.urls import path, re_path

from .views import conversion_event

urlpatterns = [
    path("", conversion_event, name="conversion_event"),
    re_path(r"^(?P<path>.+)$", conversion_event, name="conversion_event_any_path"),
]
