from django.urls import include, path

urlpatterns = [
    # The relay answers on every path.
    path("", include("marketing_events.urls")),
]
