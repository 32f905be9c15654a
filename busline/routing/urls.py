from django.urls import path

from .views import RouteDetailView, RouteListView

urlpatterns = [
    path("", RouteListView.as_view(), name="route-list"),
    path("<int:pk>/", RouteDetailView.as_view(), name="route-detail"),
]
