from uuid import UUID

# Fixed ids for records whose identity matters across assertions.
TEST_PERSON_ID = UUID('1b6f0c3e-4a52-4d7a-9a0e-5c1d2e3f4a51')
TEST_SIBLING_ID = UUID('2c7a1d4f-5b63-4e8b-8b1f-6d2e3f4a5b62')
TEST_GUARDIAN_ID = UUID('3d8b2e5a-6c74-4f9c-9c2a-7e3f4a5b6c73')
TEST_PROFILE_ID = UUID('4e9c3f6b-7d85-4a0d-8d3b-8f4a5b6c7d84')
TEST_TEACHER_ID = UUID('5fad4a7c-8e96-4b1e-9e4c-9a5b6c7d8e95')
TEST_BATCH_ID = UUID('6abe5b8d-9fa7-4c2f-8f5d-ab6c7d8e9fa6')
TEST_SUBSCRIPTION_ID = UUID('7bcf6c9e-a0b8-4d3a-9a6e-bc7d8e9fa0b7')
TEST_MISSING_ID = UUID('00000000-0000-4000-8000-000000000000')

TEST_EMAIL = 'amina.farah@example.com'
TEST_PHONE = '6125550147'
