from app import db, Application, Scholarship
from conftest import call, days_from_today


def titles(body):
    return [s['title'] for s in body['scholarships']]


def test_admin_creates_scholarship(admin, create_scholarship):
    scholarship = create_scholarship(admin)

    assert scholarship['admin_id'] == admin.user['id']
    assert scholarship['amount'] == 50000
    assert scholarship['status'] == 'active'
    assert scholarship['scholarship_type'] == 'Government'


def test_student_cannot_create_scholarship(student):
    status, body = call(student, 'createScholarship', title='Mine', eligibility='Anyone',
                        deadline=days_from_today(10), amount=100)

    assert status == 403
    assert body['error'] == 'Forbidden'


def test_create_scholarship_validation(admin):
    base = {'title': 'Grant', 'eligibility': 'Anyone', 'deadline': days_from_today(10), 'amount': 100}

    for overrides in ({'amount': 0}, {'amount': -5}, {'amount': 'lots'}, {'eligibility': ''},
                      {'title': '   '}, {'deadline': '31/12/2030'}, {'scholarship_type': 'Lottery'},
                      {'status': 'archived'}):
        status, body = call(admin, 'createScholarship', **dict(base, **overrides))
        assert status == 400, overrides
        assert body['error'] == 'ValidationError'


def test_create_scholarship_rejects_foreign_admin_id(admin, make_admin):
    other = make_admin(email='other@example.com')

    status, body = call(admin, 'createScholarship', admin_id=other.user['id'], title='Grant',
                        eligibility='Anyone', deadline=days_from_today(10), amount=100)

    assert status == 403
    assert body['error'] == 'Forbidden'


def test_listing_shows_only_active_scholarships_before_deadline(admin, anon, create_scholarship):
    create_scholarship(admin, title='Open')
    create_scholarship(admin, title='Closes Today', deadline=days_from_today(0))
    create_scholarship(admin, title='Expired', deadline=days_from_today(-1), status='active')
    create_scholarship(admin, title='Inactive', status='inactive')

    status, body = call(anon, 'getAllScholarships')

    assert status == 200
    assert sorted(titles(body)) == ['Closes Today', 'Open']
    for scholarship in body['scholarships']:
        assert scholarship['admin_name'] == 'Admin One'
        assert scholarship['application_count'] == 0


def test_listing_counts_applications(admin, student, anon, create_scholarship):
    scholarship = create_scholarship(admin)
    call(student, 'applyScholarship', scholarship_id=scholarship['id'])

    status, body = call(anon, 'getAllScholarships')

    assert body['scholarships'][0]['application_count'] == 1


def test_listing_filters_and_sorting(admin, anon, create_scholarship):
    create_scholarship(admin, title='Merit Award', scholarship_type='Government', amount=1000)
    create_scholarship(admin, title='STEM Women', scholarship_type='Private', amount=5000,
                       description='For women in science')
    create_scholarship(admin, title='Study Abroad', scholarship_type='International', amount=3000)

    status, body = call(anon, 'getAllScholarships', scholarship_type='private')
    assert titles(body) == ['STEM Women']

    status, body = call(anon, 'getAllScholarships', search='SCIENCE')
    assert titles(body) == ['STEM Women']

    status, body = call(anon, 'getAllScholarships', sort='amount')
    assert titles(body) == ['STEM Women', 'Study Abroad', 'Merit Award']

    status, body = call(anon, 'getAllScholarships', scholarship_type='all')
    assert len(body['scholarships']) == 3


def test_my_scholarships_include_inactive_and_expired(admin, make_admin, create_scholarship):
    other = make_admin(email='other@example.com', name='Admin Two')
    create_scholarship(admin, title='Open')
    create_scholarship(admin, title='Expired', deadline=days_from_today(-3))
    create_scholarship(admin, title='Inactive', status='inactive')
    create_scholarship(other, title='Not Mine')

    status, body = call(admin, 'getMyScholarships')

    assert status == 200
    assert sorted(titles(body)) == ['Expired', 'Inactive', 'Open']
    expired = {s['title']: s['is_expired'] for s in body['scholarships']}
    assert expired == {'Open': False, 'Expired': True, 'Inactive': False}

    status, body = call(admin, 'getMyScholarships', status='inactive')
    assert titles(body) == ['Inactive']


def test_owner_updates_scholarship(admin, anon, create_scholarship):
    scholarship = create_scholarship(admin)

    status, body = call(admin, 'updateScholarship', id=scholarship['id'], title='Renamed', amount='75000.50')

    assert status == 200
    assert body['scholarship']['title'] == 'Renamed'
    assert body['scholarship']['amount'] == 75000.5
    assert body['scholarship']['eligibility'] == 'Minimum GPA 3.5'


def test_deactivating_hides_scholarship_and_reactivating_restores_it(admin, anon, create_scholarship):
    scholarship = create_scholarship(admin)

    call(admin, 'updateScholarship', id=scholarship['id'], status='inactive')
    status, body = call(anon, 'getAllScholarships')
    assert body['scholarships'] == []

    call(admin, 'updateScholarship', id=scholarship['id'], status='active')
    status, body = call(anon, 'getAllScholarships')
    assert titles(body) == ['National Merit Scholarship']


def test_update_by_other_admin_is_forbidden(app, admin, make_admin, create_scholarship):
    scholarship = create_scholarship(admin)
    other = make_admin(email='other@example.com')

    status, body = call(other, 'updateScholarship', id=scholarship['id'], title='Hijacked')

    assert status == 403
    assert body['error'] == 'Forbidden'
    with app.app_context():
        assert db.session.get(Scholarship, scholarship['id']).title == 'National Merit Scholarship'


def test_update_validation_and_missing(admin, create_scholarship):
    scholarship = create_scholarship(admin)

    status, body = call(admin, 'updateScholarship', id=scholarship['id'], amount=0)
    assert status == 400

    status, body = call(admin, 'updateScholarship', id=scholarship['id'])
    assert status == 400
    assert body['message'] == 'Nothing to update.'

    status, body = call(admin, 'updateScholarship', id=9999, title='Ghost')
    assert status == 404
    assert body['error'] == 'NotFound'


def test_delete_scholarship_removes_its_applications(app, admin, student, create_scholarship):
    scholarship = create_scholarship(admin)
    call(student, 'applyScholarship', scholarship_id=scholarship['id'])

    status, body = call(admin, 'deleteScholarship', id=scholarship['id'])

    assert status == 200
    with app.app_context():
        assert db.session.get(Scholarship, scholarship['id']) is None
        assert Application.query.count() == 0


def test_delete_by_other_admin_is_forbidden(app, admin, make_admin, create_scholarship):
    scholarship = create_scholarship(admin)
    other = make_admin(email='other@example.com')

    status, body = call(other, 'deleteScholarship', id=scholarship['id'])

    assert status == 403
    with app.app_context():
        assert db.session.get(Scholarship, scholarship['id']) is not None


def test_blank_enum_values_on_update_are_rejected(admin, anon, create_scholarship):
    scholarship = create_scholarship(admin, status='inactive', scholarship_type='NGO')

    for overrides in ({'status': ''}, {'scholarship_type': ''}, {'status': None}):
        status, body = call(admin, 'updateScholarship', id=scholarship['id'], **overrides)
        assert status == 400, overrides
        assert body['error'] == 'ValidationError'

    status, body = call(admin, 'getMyScholarships')
    [mine] = body['scholarships']
    assert (mine['status'], mine['scholarship_type']) == ('inactive', 'NGO')

    status, body = call(anon, 'getAllScholarships')
    assert body['scholarships'] == []


def test_create_fills_enum_defaults(admin, create_scholarship):
    scholarship = create_scholarship(admin, status='', scholarship_type=None)

    assert scholarship['status'] == 'active'
    assert scholarship['scholarship_type'] == 'Government'


def test_search_matches_wildcard_characters_literally(admin, anon, create_scholarship):
    for title in ('100% Merit Award', '1000 Club Grant', 'A_B Fund', 'AXB Fund', 'Wow! Grant'):
        create_scholarship(admin, title=title, description='')

    status, body = call(anon, 'getAllScholarships', search='100%')
    assert titles(body) == ['100% Merit Award']

    status, body = call(anon, 'getAllScholarships', search='a_b')
    assert titles(body) == ['A_B Fund']

    status, body = call(anon, 'getAllScholarships', search='wow!')
    assert titles(body) == ['Wow! Grant']
