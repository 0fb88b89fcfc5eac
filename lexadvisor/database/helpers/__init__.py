"""
Session plumbing shared by the DAOs, the service functions, the policy
evaluator and the data gateway.

- `transactionManagement.transactional`: one SQLAlchemy session per outermost
  call, propagated to nested calls through a context variable.
"""
