# Generated migration for the timesheet datastores

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='TimeEntry',
            fields=[
                ('user_and_date', models.CharField(max_length=64, primary_key=True, serialize=False)),
                ('work_entries', models.JSONField(default=list)),
                ('break_time_entries', models.JSONField(blank=True, default=list)),
                ('time_off_entries', models.JSONField(blank=True, default=list)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name_plural': 'Time Entries',
            },
        ),
        migrations.CreateModel(
            name='Lifelog',
            fields=[
                ('user_and_date', models.CharField(max_length=64, primary_key=True, serialize=False)),
                ('logs', models.JSONField(default=list)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
        ),
        migrations.CreateModel(
            name='UserSettings',
            fields=[
                ('user', models.CharField(max_length=32, primary_key=True, serialize=False)),
                ('language', models.CharField(default='en', max_length=8)),
                ('country_id', models.CharField(blank=True, max_length=8, null=True)),
                ('app_mode', models.CharField(blank=True, choices=[('work', 'Work management'), ('work_and_lifelogs', 'Work and lifelogs')], max_length=20, null=True)),
                ('offset', models.IntegerField(default=0)),
            ],
            options={
                'verbose_name_plural': 'User Settings',
            },
        ),
        migrations.CreateModel(
            name='PublicHoliday',
            fields=[
                ('country_id_and_year', models.CharField(max_length=16, primary_key=True, serialize=False)),
                ('holidays', models.JSONField(default=list)),
            ],
        ),
        migrations.CreateModel(
            name='AdminUser',
            fields=[
                ('user', models.CharField(max_length=32, primary_key=True, serialize=False)),
            ],
        ),
        migrations.CreateModel(
            name='Project',
            fields=[
                ('code', models.CharField(max_length=20, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=50)),
                ('is_active', models.BooleanField(default=True)),
                ('description', models.TextField(blank=True, null=True)),
            ],
        ),
        migrations.CreateModel(
            name='OrganizationPolicy',
            fields=[
                ('key', models.CharField(max_length=50, primary_key=True, serialize=False)),
                ('value', models.CharField(max_length=50)),
            ],
            options={
                'verbose_name_plural': 'Organization Policies',
            },
        ),
        migrations.CreateModel(
            name='ActiveView',
            fields=[
                ('view_id', models.CharField(max_length=32, primary_key=True, serialize=False)),
                ('user_id', models.CharField(max_length=32)),
                ('last_updated_callback_id', models.CharField(max_length=50)),
                ('last_updated_at', models.IntegerField()),
            ],
        ),
    ]
