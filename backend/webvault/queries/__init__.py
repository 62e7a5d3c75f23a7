"""Query/listing functions shared by the public and admin service paths."""
