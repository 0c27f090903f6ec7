import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('tasks', '0001_initial'),
        ('volunteers', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='ReminderLedgerEntry',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('sent_on', models.DateField(db_index=True)),
                ('message_id', models.CharField(blank=True, max_length=255)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('task', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='reminder_entries', to='tasks.task')),
                ('volunteer', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='reminder_entries', to='volunteers.volunteer')),
            ],
            options={
                'verbose_name': 'reminder ledger entry',
                'verbose_name_plural': 'reminder ledger entries',
                'ordering': ['-sent_on', '-id'],
            },
        ),
        migrations.CreateModel(
            name='EscalationLedgerEntry',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('admin_email', models.EmailField(max_length=254)),
                ('sent_on', models.DateField(db_index=True)),
                ('message_id', models.CharField(blank=True, max_length=255)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('task', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='escalation_entries', to='tasks.task')),
            ],
            options={
                'verbose_name': 'escalation ledger entry',
                'verbose_name_plural': 'escalation ledger entries',
                'ordering': ['-sent_on', '-id'],
            },
        ),
        migrations.AddConstraint(
            model_name='reminderledgerentry',
            constraint=models.UniqueConstraint(fields=('task', 'volunteer', 'sent_on'), name='unique_reminder_per_task_volunteer_day'),
        ),
        migrations.AddConstraint(
            model_name='escalationledgerentry',
            constraint=models.UniqueConstraint(fields=('task', 'admin_email', 'sent_on'), name='unique_escalation_per_task_admin_day'),
        ),
    ]
