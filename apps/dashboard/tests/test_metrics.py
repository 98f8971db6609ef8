"""
Dashboard Aggregation Tests
===========================

Test Coverage:
1. Period helpers - day and month bounds in local time
2. Goal gauge - metrics, percentage, trend, manual vs previous month
3. Performance ranking - grouping, unassigned bucket, ties, success rate
4. Incomplete and stale customer lists
5. Activity timeline

Run tests:
    python manage.py test apps.dashboard.tests.test_metrics
"""

from datetime import date, datetime, timedelta

from django.test import SimpleTestCase, TestCase
from django.utils import timezone

from apps.accounts.models import Team
from apps.accounts.tests.utils import make_user
from apps.customers.models import Customer, CustomerHistory
from apps.dashboard.metrics import (
    UNASSIGNED_NAME,
    UNASSIGNED_TEAM_NAME,
    activity_description,
    day_bounds,
    goal_percentage,
    goal_summary,
    goal_trend,
    incomplete_customers,
    month_bounds,
    performance_rows,
    stale_customers,
    timeline,
)


def _local(*args):
    return timezone.make_aware(datetime(*args))


class PeriodHelpersTest(SimpleTestCase):

    def test_day_bounds(self):
        start, end = day_bounds(date(2025, 3, 15))

        self.assertEqual(timezone.localtime(start), _local(2025, 3, 15))
        self.assertEqual(end - start, timedelta(days=1) - timedelta(microseconds=1))

    def test_month_bounds(self):
        start, end = month_bounds(_local(2025, 3, 15, 12))

        self.assertEqual(start, _local(2025, 3, 1))
        self.assertEqual(end + timedelta(microseconds=1), _local(2025, 4, 1))

    def test_previous_month_across_year(self):
        start, end = month_bounds(_local(2025, 1, 10), months_back=1)

        self.assertEqual(start, _local(2024, 12, 1))
        self.assertEqual(end + timedelta(microseconds=1), _local(2025, 1, 1))


class GoalMathTest(SimpleTestCase):

    def test_percentage(self):
        self.assertEqual(goal_percentage(15, 20), 75.0)
        self.assertEqual(goal_percentage(1, 3), 33.3)
        self.assertEqual(goal_percentage(5, 0), 100)
        self.assertEqual(goal_percentage(0, 0), 0)

    def test_trend(self):
        self.assertEqual(goal_trend(120), 'up')
        self.assertEqual(goal_trend(100), 'same')
        self.assertEqual(goal_trend(80), 'same')
        self.assertEqual(goal_trend(79.9), 'down')


class GoalSummaryTest(TestCase):

    def setUp(self):
        self.now = _local(2025, 3, 15, 12)
        self.agent = make_user('agent01')
        for day, status in ((2, 'completed'), (3, 'completed'), (4, 'completed'), (5, 'prospect')):
            Customer.objects.create(phone='01012345678', status=status, created_at=_local(2025, 3, day))
        for day in (3, 4, 5, 6):
            Customer.objects.create(phone='01012345678', status='completed', created_at=_local(2025, 2, day))
        Customer.objects.create(phone='01012345678', status='completed', created_at=_local(2025, 3, 9),
                                assigned_to=self.agent)

    def test_previous_month_goal(self):
        """
        Test: 4 completed this month vs 4 completed last month

        Expected: 100%, trend 'same', previous period reported
        """
        summary = goal_summary(now=self.now)

        self.assertEqual((summary['current'], summary['goal']), (4, 4))
        self.assertEqual(summary['percentage'], 100.0)
        self.assertEqual(summary['trend'], 'same')
        self.assertIsNotNone(summary['period']['previous'])

    def test_manual_goal(self):
        summary = goal_summary(goal_type='manual', manual_goal=10, now=self.now)

        self.assertEqual(summary['goal'], 10)
        self.assertEqual(summary['percentage'], 40.0)
        self.assertEqual(summary['trend'], 'down')
        self.assertIsNone(summary['period']['previous'])

    def test_total_and_success_rate(self):
        self.assertEqual(goal_summary(metric='total', now=self.now)['current'], 5)
        self.assertEqual(goal_summary(metric='success_rate', now=self.now)['current'], 80.0)

    def test_assignee_filter(self):
        summary = goal_summary(assigned_to=self.agent.id, now=self.now)

        self.assertEqual((summary['current'], summary['goal']), (1, 0))
        self.assertEqual(summary['percentage'], 100)
        self.assertEqual(summary['trend'], 'same')


class PerformanceRowsTest(TestCase):

    def setUp(self):
        self.team = Team.objects.create(name='영업1팀')
        self.kim = make_user('kim01', name='김상담', team=self.team)
        self.lee = make_user('lee01', name='이상담')

        def add(user, status, count):
            for _ in range(count):
                Customer.objects.create(phone='01012345678', status=status, assigned_to=user)

        add(self.kim, 'completed', 1)
        add(self.kim, 'prospect', 3)
        add(self.lee, 'completed', 3)
        add(self.lee, 'cancelled', 1)
        add(None, 'in_progress', 2)

    def test_assignee_ranking(self):
        rows = performance_rows(Customer.objects.all())

        self.assertEqual([r['id'] for r in rows], [self.lee.id, self.kim.id, 'unassigned'])
        self.assertEqual([r['rank'] for r in rows], [1, 2, 3])

        lee = rows[0]
        self.assertEqual((lee['totalCount'], lee['completedCount'], lee['cancelledCount']), (4, 3, 1))
        self.assertEqual(lee['successRate'], 75.0)

        kim = rows[1]
        self.assertEqual((kim['teamId'], kim['teamName']), (self.team.id, '영업1팀'))
        self.assertEqual(rows[2]['name'], UNASSIGNED_NAME)
        self.assertEqual(rows[2]['successRate'], 0)

    def test_team_grouping(self):
        rows = performance_rows(Customer.objects.all(), group_by='team')

        by_id = {r['id']: r for r in rows}
        self.assertEqual(by_id[self.team.id]['totalCount'], 4)
        # lee has no team, so the unassigned bucket holds lee's rows and the unassigned rows
        self.assertEqual(by_id['unassigned']['totalCount'], 6)
        self.assertEqual(by_id['unassigned']['name'], UNASSIGNED_TEAM_NAME)
        self.assertEqual(rows[0]['id'], 'unassigned')

    def test_ties_keep_first_seen_order(self):
        Customer.objects.filter(assigned_to=self.lee, status='completed').delete()
        Customer.objects.create(phone='01012345678', status='completed', assigned_to=self.lee)

        rows = performance_rows(Customer.objects.order_by('id'))

        self.assertEqual([r['id'] for r in rows][:2], [self.kim.id, self.lee.id])

    def test_empty(self):
        self.assertEqual(performance_rows(Customer.objects.none()), [])


class CustomerListsTest(TestCase):

    def setUp(self):
        self.now = timezone.now()
        self.agent = make_user('agent01', name='김상담')

    def test_incomplete_customers(self):
        """
        Test: Open customers with and without name/notes, plus old and closed ones

        Expected: only recent open rows with a missing field, newest first
        """
        both = Customer.objects.create(phone='01011110001', created_at=self.now - timedelta(hours=1))
        no_notes = Customer.objects.create(phone='01011110002', name='김민준', status='in_progress',
                                           created_at=self.now - timedelta(hours=2))
        Customer.objects.create(phone='01011110003', name='이서연', notes='통화완료',
                                created_at=self.now - timedelta(hours=3))
        Customer.objects.create(phone='01011110004', status='completed', created_at=self.now - timedelta(hours=4))
        Customer.objects.create(phone='01011110005', created_at=self.now - timedelta(days=10))

        rows = incomplete_customers(now=self.now)

        self.assertEqual([r['id'] for r in rows], [both.id, no_notes.id])
        self.assertEqual(rows[0]['missingFields'], ['name', 'notes'])
        self.assertEqual(rows[1]['missingFields'], ['notes'])

    def test_incomplete_limit_applies_before_filter(self):
        Customer.objects.create(phone='01011110001', name='완료', notes='메모', created_at=self.now - timedelta(hours=1))
        Customer.objects.create(phone='01011110002', created_at=self.now - timedelta(hours=2))

        self.assertEqual(incomplete_customers(limit=1, now=self.now), [])

    def test_stale_customers(self):
        old = Customer.objects.create(phone='01011110001', status='in_progress', assigned_to=self.agent)
        older = Customer.objects.create(phone='01011110002', status='in_progress')
        Customer.objects.create(phone='01011110003', status='in_progress')
        Customer.objects.filter(pk=old.pk).update(updated_at=self.now - timedelta(days=8))
        Customer.objects.filter(pk=older.pk).update(updated_at=self.now - timedelta(days=20))

        rows = stale_customers(now=self.now)

        self.assertEqual([r['id'] for r in rows], [older.id, old.id])
        self.assertEqual(rows[0]['daysSinceUpdate'], 20)
        self.assertEqual(rows[1]['assigneeName'], '김상담')

        self.assertEqual([r['id'] for r in stale_customers(assigned_to=self.agent.id, now=self.now)], [old.id])
        self.assertEqual(stale_customers(status='callback', now=self.now), [])


class TimelineTest(TestCase):

    def setUp(self):
        self.agent = make_user('agent01', name='김상담')
        self.customer = Customer.objects.create(phone='01012345678', name='김민준', assigned_to=self.agent)
        self.other = Customer.objects.create(phone='01087654321')

    def test_newest_first_with_descriptions(self):
        self.customer.status = 'in_progress'
        self.customer._changed_by = self.agent
        self.customer.save()
        self.other.notes = '부재중'
        self.other.save()

        entries = timeline()

        self.assertEqual([e['fieldName'] for e in entries], ['notes', 'status'])
        self.assertEqual(entries[0]['action'], 'note_update')
        self.assertEqual(entries[0]['description'], '고객에게 메모가 추가되었습니다')
        self.assertEqual(entries[1]['description'], '김민준의 상태가 변경되었습니다')
        self.assertEqual(entries[1]['userName'], '김상담')

    def test_assignee_scope_and_limit(self):
        self.other.notes = 'x'
        self.other.save()
        for status in ('in_progress', 'callback', 'completed'):
            self.customer.status = status
            self.customer.save()

        self.assertEqual(len(timeline(assigned_to=self.agent.id)), 3)
        self.assertEqual(len(timeline(limit=2)), 2)

    def test_unknown_field_description(self):
        self.assertEqual(activity_description('income', '이서연'), '이서연의 정보가 업데이트되었습니다')
        self.assertEqual(CustomerHistory.objects.count(), 0)
