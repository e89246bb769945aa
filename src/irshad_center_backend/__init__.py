'''
Irshad Center admin backend: validation, duplicate detection and payment
health for Mahad and Dugsi students.
'''
