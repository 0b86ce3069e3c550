"""Logistics back-office API: customers, couriers, deliveries, status board, dashboard and live tracking."""
