"""
Integration services.

Services orchestrate integration clients and storage:
- payment_flow_service: checkout initiation, IPN validation, redirects
- image_batch_service: paced batches of generated images
- response_wrappers: normalized views over raw provider payloads
"""
