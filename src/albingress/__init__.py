"""albingress - application load balancer routers from Kubernetes ingress rules."""

__version__ = "0.1.0"
