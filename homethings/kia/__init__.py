"""Units and vehicle state models for parsing vehicle status responses."""