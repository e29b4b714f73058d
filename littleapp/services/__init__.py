"""
Little Application: Services Layer
=====================================

What:  Business logic between the routes (HTTP) and the ORM models.

Service Inventory:
    - PostService:   advanced results over posts, post CRUD, photo upload
    - CourseService: advanced results over courses, course CRUD, average cost
    - ReviewService: advanced results over reviews, review CRUD, average rating
    - UserService:   admin advanced results over users, user CRUD and cleanup
    - AuthService:   register, login, token issuance, own account updates
    - FileService:   photo validation and storage
    - access:        owner-or-admin checks shared by the services

Services raise LittleAppError subclasses; the handlers in main.py turn
them into HTTP responses.
"""
