from django.urls import path

from .views import (
    ActiveDrivesView,
    CheckpointCompleteView,
    DriveDetailView,
    DriveEndView,
    DriveLocationView,
    DriveStartView,
    GpsLogView,
)

urlpatterns = [
    path("drive/start/", DriveStartView.as_view(), name="drive-start"),
    path("drive/active/", ActiveDrivesView.as_view(), name="drive-active"),
    path("drive/<int:pk>/", DriveDetailView.as_view(), name="drive-detail"),
    path("drive/<int:pk>/location/", DriveLocationView.as_view(), name="drive-location"),
    path(
        "drive/<int:pk>/checkpoint/<int:index>/complete/",
        CheckpointCompleteView.as_view(),
        name="drive-checkpoint-complete",
    ),
    path("drive/<int:pk>/end/", DriveEndView.as_view(), name="drive-end"),
    path("gps/log/", GpsLogView.as_view(), name="gps-log"),
]
