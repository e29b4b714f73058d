"""
Little Application: API Routes Package
=========================================

Route Inventory:
    - posts.py:    GET/POST       /api/v1/posts
                   GET/PUT/DELETE /api/v1/posts/{id}
                   PUT            /api/v1/posts/{id}/photo
    - courses.py:  GET            /api/v1/courses
                   GET/POST       /api/v1/posts/{post_id}/courses
                   GET/PUT/DELETE /api/v1/courses/{id}
    - reviews.py:  GET            /api/v1/reviews
                   GET/POST       /api/v1/posts/{post_id}/reviews
                   GET/PUT/DELETE /api/v1/reviews/{id}
    - auth.py:     POST /api/v1/auth/register, POST /api/v1/auth/login,
                   GET  /api/v1/auth/logout,   GET  /api/v1/auth/me,
                   PUT  /api/v1/auth/updatedetails,
                   PUT  /api/v1/auth/updatepassword
    - users.py:    GET/POST       /api/v1/users             (admin)
                   GET/PUT/DELETE /api/v1/users/{id}        (admin)
    - health.py:   GET  /health

Routes stay thin: read the request, call a service, shape the response.
"""
