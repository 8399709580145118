# Utils package for MHCloth backend
