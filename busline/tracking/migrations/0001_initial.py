import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="DriveSession",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("route_ref", models.CharField(max_length=64)),
                ("route_snapshot", models.JSONField(default=dict)),
                ("status", models.CharField(choices=[("running", "Running"), ("completed", "Completed")], default="running", max_length=16)),
                ("approach_radius", models.FloatField(default=0.5)),
                ("arrival_radius", models.FloatField(default=0.1)),
                ("current_location", models.JSONField(blank=True, null=True)),
                ("previous_location", models.JSONField(blank=True, null=True)),
                ("checkpoints", models.JSONField(default=list)),
                ("start_time", models.DateTimeField(default=django.utils.timezone.now)),
                ("end_time", models.DateTimeField(blank=True, null=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "indexes": [models.Index(fields=["status"], name="drive_session_status_idx")],
            },
        ),
        migrations.CreateModel(
            name="GpsLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("payload", models.JSONField(blank=True, default=dict)),
                ("received_at", models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                "indexes": [models.Index(fields=["received_at"], name="gps_log_received_idx")],
            },
        ),
    ]
