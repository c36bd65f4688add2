from datetime import datetime, timedelta

from gatepass.routes.stats_routes import request_stats, user_stats


def test_user_stats_counts_roles_and_statuses(gatepass_db, make_user) -> None:
    make_user('alice', role='Student', status='in')
    make_user('bob', role='Student', status='out')
    make_user('carol', role='Visitor', status='in')
    make_user('dave', role='Student', status='home')

    stats = user_stats(db=gatepass_db)

    assert sorted((row['role'], row['count']) for row in stats['byRole']) == [('Student', 3), ('Visitor', 1)]
    assert sorted((row['status'], row['count']) for row in stats['byStatus']) == [('home', 1), ('in', 2), ('out', 1)]
    assert stats['inCampus'] == {'in_count': 2, 'out_count': 1, 'home_count': 1}


def test_user_stats_on_empty_table(gatepass_db) -> None:
    stats = user_stats(db=gatepass_db)

    assert stats == {
        'byRole': [],
        'byStatus': [],
        'inCampus': {'in_count': 0, 'out_count': 0, 'home_count': 0},
    }


def test_request_stats_groups_recent_requests_by_day(gatepass_db, make_request) -> None:
    today = datetime.now().replace(hour=12, minute=0, second=0, microsecond=0)
    yesterday = today - timedelta(days=1)
    make_request('alice', 'out', status='Approved', requested_at=today)
    make_request('bob', 'in', status='Pending', requested_at=today)
    make_request('carol', 'OOHostel', status='Rejected', requested_at=yesterday)
    make_request('dave', 'out', status='Approved', requested_at=today - timedelta(days=45))

    stats = request_stats(db=gatepass_db)

    assert stats['daily'] == [
        {
            'date': today.date().isoformat(),
            'total_requests': 2,
            'approved': 1,
            'rejected': 0,
            'pending': 1,
        },
        {
            'date': yesterday.date().isoformat(),
            'total_requests': 1,
            'approved': 0,
            'rejected': 1,
            'pending': 0,
        },
    ]
    assert sorted((row['type'], row['count']) for row in stats['byType']) == [('OOHostel', 1), ('in', 1), ('out', 2)]
