"""WorkTrack access service — role-based authorization for the HR/project tracker."""
