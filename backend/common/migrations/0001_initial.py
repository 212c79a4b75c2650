from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='SuspiciousActivityLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('activity_type', models.CharField(choices=[('INVALID_TOKEN', 'Invalid Release Token'), ('MISSING_TOKEN', 'Missing Release Token'), ('INVALID_ADMIN_KEY', 'Invalid Admin Key'), ('RATE_LIMIT_EXCEEDED', 'Rate Limit Exceeded')], db_index=True, max_length=30)),
                ('severity', models.CharField(choices=[('LOW', 'Low'), ('MEDIUM', 'Medium'), ('HIGH', 'High'), ('CRITICAL', 'Critical')], db_index=True, default='MEDIUM', max_length=10)),
                ('order_id', models.CharField(blank=True, db_index=True, help_text='Order targeted by the request (if any)', max_length=10)),
                ('details', models.JSONField(default=dict, help_text='Details about the suspicious activity')),
                ('ip_address', models.GenericIPAddressField(blank=True, null=True)),
                ('user_agent', models.TextField(blank=True, null=True)),
                ('timestamp', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('resolved', models.BooleanField(default=False, help_text='Whether the issue has been investigated/resolved')),
            ],
            options={
                'verbose_name': 'Suspicious Activity Log',
                'verbose_name_plural': 'Suspicious Activity Logs',
                'db_table': 'suspicious_activity_log',
                'ordering': ['-timestamp'],
                'indexes': [
                    models.Index(fields=['activity_type', 'severity'], name='suspicious_type_severity_idx'),
                    models.Index(fields=['ip_address', 'timestamp'], name='suspicious_ip_time_idx'),
                ],
            },
        ),
    ]
